#!/usr/bin/env python3
import asyncio
import logging
import math
from typing import Any, Dict, List, Optional, Sequence

from analysis.models import AnalyzedToken, ProfitabilityThresholds, RiskProfile, Token, TokenMetrics
from analysis.volatility import calculate_volatility
from constants import DEFAULT_MAX_CONCURRENT_FETCHES
from services.metrics_client import TokenMetricsClient


class MetricsPayloadError(ValueError):
    """Raised when a metrics payload holds non-numeric values."""


def _to_number(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise MetricsPayloadError(f"{label} is not numeric: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise MetricsPayloadError(f"{label} is not numeric: {value!r}") from exc
    if not math.isfinite(number):
        raise MetricsPayloadError(f"{label} is not finite: {value!r}")
    return number


def _as_number(payload: Dict[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0.0
    return _to_number(value, key)


def build_metrics(payload: Dict[str, Any]) -> TokenMetrics:
    """Normalises a raw metrics payload and derives volatility and turnover."""
    price = _as_number(payload, 'price')
    volume_24h = _as_number(payload, 'volume24h')
    price_change_24h = _as_number(payload, 'priceChange24h')
    liquidity_usd = _as_number(payload, 'liquidityUSD')

    history = payload.get('historicalPrices') or []
    if not isinstance(history, list):
        raise MetricsPayloadError(f"historicalPrices is not a list: {history!r}")
    prices = [_to_number(p, f"historicalPrices[{i}]") for i, p in enumerate(history)]

    # An empty pool has no meaningful turnover.
    volume_to_liquidity = volume_24h / liquidity_usd if liquidity_usd > 0 else 0.0
    volatility = calculate_volatility(prices)
    if not math.isfinite(volatility) or not math.isfinite(volume_to_liquidity):
        raise MetricsPayloadError("price history or turnover is out of range")

    return TokenMetrics(
        price=price,
        volume_24h=volume_24h,
        price_change_24h=price_change_24h,
        liquidity_usd=liquidity_usd,
        volatility=volatility,
        volume_to_liquidity=volume_to_liquidity,
    )


class TokenAnalyzer:
    def __init__(
        self,
        metrics_client: TokenMetricsClient,
        thresholds: Optional[ProfitabilityThresholds] = None,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENT_FETCHES,
        logger: Optional[logging.Logger] = None,
    ):
        if max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")
        self.metrics_client = metrics_client
        self.thresholds = thresholds or ProfitabilityThresholds()
        self.max_concurrency = max_concurrency
        self.logger = logger or logging.getLogger(__name__)

    async def analyze(self, tokens: Sequence[Token]) -> List[AnalyzedToken]:
        """Fetches metrics for every token and keeps the ones worth buying."""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _analyze_one(token: Token) -> Optional[AnalyzedToken]:
            async with semaphore:
                payload = await self.metrics_client.get_metrics(token)
            if payload is None:
                return None
            try:
                metrics = build_metrics(payload)
            except MetricsPayloadError as exc:
                self.logger.warning("Discarding metrics for %s: %s", token.symbol, exc)
                return None
            return self.classify(token, metrics)

        results = await asyncio.gather(*(_analyze_one(token) for token in tokens))
        analyzed = [token for token in results if token is not None]
        self.logger.info("%d of %d tokens passed profitability checks", len(analyzed), len(tokens))
        return analyzed

    def classify(self, token: Token, metrics: TokenMetrics) -> Optional[AnalyzedToken]:
        limits = self.thresholds
        is_high_volatility = metrics.volatility > limits.high_volatility
        is_high_turnover = metrics.volume_to_liquidity > limits.high_turnover

        if is_high_volatility and is_high_turnover:
            # Thinner pools are acceptable when the dip is deeper.
            is_profitable = (
                metrics.liquidity_usd >= limits.relaxed_min_liquidity_usd
                and metrics.volume_24h >= limits.relaxed_min_volume_24h
                and metrics.price_change_24h < limits.relaxed_max_price_change_24h
            )
        else:
            is_profitable = (
                metrics.liquidity_usd >= limits.standard_min_liquidity_usd
                and metrics.volume_24h >= limits.standard_min_volume_24h
                and metrics.price_change_24h < limits.standard_max_price_change_24h
            )

        if not is_profitable:
            return None

        return AnalyzedToken(
            symbol=token.symbol,
            address=token.address,
            decimals=token.decimals,
            name=token.name,
            risk_profile=RiskProfile.HIGH if is_high_volatility else RiskProfile.STANDARD,
            metrics=metrics,
        )
