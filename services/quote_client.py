#!/usr/bin/env python3
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

import aiohttp

from constants import BASE_API_BASE_URL, DEFAULT_REQUEST_TIMEOUT
from services.http_utils import FETCH_ERRORS, fetch_json


class QuoteError(RuntimeError):
    """Raised when a swap quote cannot be retrieved or parsed."""


class QuoteClient:
    """Off-chain swap quotes from the Base API."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        base_url: str = BASE_API_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip('/')
        self._timeout = timeout

    async def get_expected_output(self, from_token: str, to_token: str, amount: int) -> Decimal:
        url = f"{self._base_url}/quote"
        params = {'fromToken': from_token, 'toToken': to_token, 'amount': str(amount)}
        try:
            quote = await fetch_json(url, self._session, params=params, timeout=self._timeout)
        except FETCH_ERRORS as exc:
            raise QuoteError(f"quote request failed: {exc}") from exc

        expected: Optional[object] = quote.get('expectedOutput') if isinstance(quote, dict) else None
        if expected is None or isinstance(expected, bool):
            raise QuoteError(f"quote response missing expectedOutput: {quote!r}")
        try:
            value = Decimal(str(expected))
        except InvalidOperation as exc:
            raise QuoteError(f"invalid expectedOutput {expected!r}") from exc
        if not value.is_finite() or value <= 0:
            raise QuoteError(f"invalid expectedOutput {expected!r}")
        return value
