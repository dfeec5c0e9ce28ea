#!/usr/bin/env python3
"""Agent plugin that finds discounted Base tokens and buys them."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Any, Awaitable, Callable, Dict, List, Optional, Type, Union

import aiohttp
from pydantic import BaseModel, Field

from analysis.models import ProfitabilityThresholds, Token, TradeResult
from analysis.token_analyzer import TokenAnalyzer
from constants import (
    BASE_API_BASE_URL,
    BASE_CHAIN_ID,
    DEFAULT_MAX_CONCURRENT_FETCHES,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    SLIPPAGE_TOLERANCE,
)
from services.metrics_client import TokenMetricsClient
from services.quote_client import QuoteClient
from services.token_list_client import TokenListClient
from services.trade_executor import TradeExecutionError, TradeExecutor
from services.wallet import WalletClient


class FindAndTradeParameters(BaseModel):
    amount: Optional[Annotated[float, Field(gt=0)]] = Field(
        default=1.0, description="Amount of ETH to spend on each profitable token."
    )


@dataclass(frozen=True)
class Tool:
    """A named, schema-validated callable exposed to the host agent."""
    name: str
    description: str
    parameters: Type[BaseModel]
    method: Callable[[BaseModel], Awaitable[str]]

    async def invoke(self, arguments: Optional[Dict[str, Any]] = None) -> str:
        params = self.parameters.model_validate(arguments or {})
        return await self.method(params)


@dataclass(frozen=True)
class TradeFailure:
    token_symbol: str
    reason: str


TradeOutcome = Union[TradeResult, TradeFailure]


def format_trade_outcome(outcome: TradeOutcome) -> str:
    if isinstance(outcome, TradeFailure):
        return f"- FAILED {outcome.token_symbol}: {outcome.reason}"
    return f"- Bought {outcome.token_symbol} with {outcome.amount:g} ETH (tx {outcome.transaction_hash})"


def format_summary(outcomes: List[TradeOutcome]) -> str:
    if not outcomes:
        return "No profitable tokens found on Base; no trades executed."
    succeeded = sum(1 for outcome in outcomes if isinstance(outcome, TradeResult))
    failed = len(outcomes) - succeeded
    lines = [f"Trades executed: {succeeded} succeeded, {failed} failed"]
    lines.extend(format_trade_outcome(outcome) for outcome in outcomes)
    return "\n".join(lines)


class DynamicTradingPlugin:
    name = "Dynamic Base Trading"
    tool_name = "find_and_trade_base_tokens"
    tool_description = "This {{tool}} finds profitable tokens on Base and executes trades"

    def __init__(
        self,
        token_list_client: TokenListClient,
        analyzer: TokenAnalyzer,
        executor: TradeExecutor,
        *,
        chain_id: int = BASE_CHAIN_ID,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.token_list_client = token_list_client
        self.analyzer = analyzer
        self.executor = executor
        self.chain_id = chain_id
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_session(
        cls,
        session: aiohttp.ClientSession,
        *,
        api_base_url: str = BASE_API_BASE_URL,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        max_concurrency: int = DEFAULT_MAX_CONCURRENT_FETCHES,
        slippage_tolerance: float = SLIPPAGE_TOLERANCE,
        thresholds: Optional[ProfitabilityThresholds] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "DynamicTradingPlugin":
        """Wires the default HTTP-backed collaborators around one shared session."""
        token_list_client = TokenListClient(session, timeout=request_timeout, logger=logger)
        metrics_client = TokenMetricsClient(
            session, base_url=api_base_url, timeout=request_timeout, logger=logger
        )
        analyzer = TokenAnalyzer(
            metrics_client, thresholds, max_concurrency=max_concurrency, logger=logger
        )
        executor = TradeExecutor(
            QuoteClient(session, base_url=api_base_url, timeout=request_timeout),
            slippage_tolerance=slippage_tolerance,
            receipt_timeout=receipt_timeout,
            logger=logger,
        )
        return cls(token_list_client, analyzer, executor, logger=logger)

    def supports_chain(self, chain: Union[int, Dict[str, Any]]) -> bool:
        chain_id = chain.get('id') if isinstance(chain, dict) else chain
        return chain_id == self.chain_id

    def supports_smart_wallets(self) -> bool:
        return True

    async def get_tools(self, wallet: WalletClient) -> List[Tool]:
        async def find_and_trade(params: FindAndTradeParameters) -> str:
            amount = params.amount if params.amount is not None else 1.0
            return await self.find_and_trade(wallet, amount)

        return [
            Tool(
                name=self.tool_name,
                description=self.tool_description,
                parameters=FindAndTradeParameters,
                method=find_and_trade,
            )
        ]

    async def find_and_trade(self, wallet: WalletClient, amount: float = 1.0) -> str:
        available_tokens = await self.token_list_client.list_tokens(self.chain_id)
        profitable_tokens = await self.analyzer.analyze(available_tokens)

        outcomes: List[TradeOutcome] = []
        for token in profitable_tokens:
            outcomes.append(await self._trade(wallet, token, amount))
        return format_summary(outcomes)

    async def _trade(self, wallet: WalletClient, token: Token, amount: float) -> TradeOutcome:
        try:
            return await self.executor.execute(wallet, token, amount)
        except TradeExecutionError as exc:
            self.logger.warning("Skipping %s after failed trade: %s", token.symbol, exc.cause)
            return TradeFailure(token_symbol=token.symbol, reason=str(exc.cause) or type(exc.cause).__name__)
