#!/usr/bin/env python3
"""Token list retrieval with a built-in fallback."""
from __future__ import annotations

import logging
from typing import Any, Optional

import aiohttp

from analysis.models import Token
from constants import CHAIN_CONFIG, DEFAULT_REQUEST_TIMEOUT, FALLBACK_TOKENS
from services.http_utils import FETCH_ERRORS, fetch_json

_REQUIRED_FIELDS = ('symbol', 'address', 'decimals', 'name')


class TokenListError(ValueError):
    """Raised internally when a token list payload has an unexpected shape."""


def parse_token_list(payload: Any) -> tuple[Token, ...]:
    if not isinstance(payload, list):
        raise TokenListError(f"expected a JSON array, got {type(payload).__name__}")

    tokens = []
    for entry in payload:
        if not isinstance(entry, dict) or any(field not in entry for field in _REQUIRED_FIELDS):
            raise TokenListError(f"malformed token entry: {entry!r}")
        try:
            decimals = int(entry['decimals'])
        except (TypeError, ValueError) as exc:
            raise TokenListError(f"invalid decimals for {entry.get('symbol')}: {exc}") from exc
        tokens.append(Token(
            symbol=str(entry['symbol']),
            address=str(entry['address']),
            decimals=decimals,
            name=str(entry['name']),
        ))
    return tuple(tokens)


def fallback_tokens() -> tuple[Token, ...]:
    return tuple(Token(**entry) for entry in FALLBACK_TOKENS)


class TokenListClient:
    """Fetches the public token registry for a chain; never raises."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._session = session
        self._timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    async def list_tokens(self, chain_id: int) -> tuple[Token, ...]:
        chain_info = CHAIN_CONFIG.get(chain_id)
        if chain_info is None:
            self.logger.warning("No token list configured for chain %s; using fallback tokens", chain_id)
            return fallback_tokens()

        url = str(chain_info['tokenListUrl'])
        try:
            payload = await fetch_json(url, self._session, timeout=self._timeout)
            tokens = parse_token_list(payload)
        except FETCH_ERRORS as exc:
            self.logger.warning("Error fetching %s tokens: %s; using fallback tokens", chain_info['name'], exc)
            return fallback_tokens()

        self.logger.info("Fetched %d tokens for %s", len(tokens), chain_info['name'])
        return tokens
