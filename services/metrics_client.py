#!/usr/bin/env python3
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import aiohttp

from analysis.models import Token
from constants import BASE_API_BASE_URL, DEFAULT_REQUEST_TIMEOUT
from services.http_utils import FETCH_ERRORS, fetch_json


class TokenMetricsClient:
    """Thin async wrapper for the per-token metrics endpoint."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        base_url: str = BASE_API_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip('/')
        self._timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    async def get_metrics(self, token: Token) -> Optional[Dict[str, Any]]:
        """Returns the raw metrics payload, or None when the fetch fails."""
        url = f"{self._base_url}/tokens/{token.address}/metrics"
        try:
            payload = await fetch_json(url, self._session, timeout=self._timeout)
        except FETCH_ERRORS as exc:
            self.logger.warning("Error fetching metrics for %s: %s", token.symbol, exc)
            return None

        if not isinstance(payload, dict):
            self.logger.warning("Unexpected metrics payload for %s: %r", token.symbol, payload)
            return None
        return payload
