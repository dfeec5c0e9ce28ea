"""Swap execution for analysed Base tokens."""
from __future__ import annotations

import asyncio
import logging
import math
import time
from decimal import Decimal
from typing import Optional

from analysis.models import Token, TradeResult
from constants import (
    BASE_CHAIN_ID,
    CHAIN_CONFIG,
    DEFAULT_RECEIPT_TIMEOUT,
    ROUTER_ABI,
    SLIPPAGE_TOLERANCE,
    SWAP_DEADLINE_SECONDS,
)
from services.quote_client import QuoteClient
from services.wallet import WalletClient

NATIVE_DECIMALS = 18


class TradeExecutionError(RuntimeError):
    """A swap for one token failed at some step; wraps the underlying cause."""

    def __init__(self, token_symbol: str, cause: BaseException) -> None:
        super().__init__(f"Failed to execute trade for {token_symbol}: {str(cause) or type(cause).__name__}")
        self.token_symbol = token_symbol
        self.cause = cause


class TradeExecutor:
    """Buys tokens with native ETH through the chain's V2-style router."""

    def __init__(
        self,
        quote_client: QuoteClient,
        *,
        chain_id: int = BASE_CHAIN_ID,
        slippage_tolerance: float = SLIPPAGE_TOLERANCE,
        deadline_seconds: int = SWAP_DEADLINE_SECONDS,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not 0 <= slippage_tolerance < 1:
            raise ValueError("slippage_tolerance must be in [0, 1)")
        chain_info = CHAIN_CONFIG[chain_id]
        self.quote_client = quote_client
        self.wrapped_native_address = str(chain_info['wrappedNativeAddress'])
        self.router_address = str(chain_info['routerAddress'])
        self.slippage = Decimal(str(slippage_tolerance))
        self.deadline_seconds = deadline_seconds
        self.receipt_timeout = receipt_timeout
        self.logger = logger or logging.getLogger(__name__)

    def minimum_amount_out(self, expected_output: Decimal) -> int:
        return math.floor(Decimal(expected_output) * (Decimal(1) - self.slippage))

    async def execute(self, wallet: WalletClient, token: Token, amount: float) -> TradeResult:
        """Swaps `amount` ETH for `token`, raising TradeExecutionError on any failure."""
        try:
            amount_wei = self._to_wei(Decimal(str(amount)), NATIVE_DECIMALS)
            router = await wallet.get_contract(self.router_address, ROUTER_ABI)
            deadline = int(time.time()) + self.deadline_seconds
            path = [self.wrapped_native_address, token.address]

            expected_output = await self.quote_client.get_expected_output(
                self.wrapped_native_address, token.address, amount_wei
            )
            minimum_out = self.minimum_amount_out(expected_output)

            self.logger.info(
                "Swapping %s ETH for %s | expected=%s min_out=%s deadline=%s",
                amount,
                token.symbol,
                expected_output,
                minimum_out,
                deadline,
            )

            tx = await router.swap_exact_eth_for_tokens(
                minimum_out,
                path,
                await wallet.get_address(),
                deadline,
                value=amount_wei,
            )
            receipt = await asyncio.wait_for(tx.wait(), timeout=self.receipt_timeout)
            if receipt.status == 0:
                raise RuntimeError(f"transaction {receipt.transaction_hash} reverted")
        except Exception as exc:
            self.logger.error("Trade execution failed for %s: %s", token.symbol, exc)
            raise TradeExecutionError(token.symbol, exc) from exc

        self.logger.info("Trade executed: Bought %s with %s ETH", token.symbol, amount)
        return TradeResult(
            success=True,
            transaction_hash=receipt.transaction_hash,
            amount=amount,
            token_symbol=token.symbol,
            minimum_amount_out=minimum_out,
        )

    @staticmethod
    def _to_wei(amount: Decimal, decimals: int) -> int:
        scale = Decimal(10) ** decimals
        return int((amount * scale).to_integral_value())
