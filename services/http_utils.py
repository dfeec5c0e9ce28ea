#!/usr/bin/env python3
"""Shared aiohttp helpers for the Base API clients."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from constants import DEFAULT_REQUEST_TIMEOUT

# Failures a single GET can end with: transport errors, non-2xx statuses,
# timeouts and bodies that are not valid JSON.
FETCH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError)


async def fetch_json(
    url: str,
    session: aiohttp.ClientSession,
    params: Optional[Dict[str, Any]] = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> Any:
    """Makes one async GET request and returns the decoded JSON body."""
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    async with session.get(url, params=params, timeout=client_timeout) as response:
        response.raise_for_status()
        return await response.json(content_type=None)
