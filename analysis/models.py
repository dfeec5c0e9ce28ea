#!/usr/bin/env python3
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import constants


@dataclass(frozen=True, slots=True)
class Token:
    """A token listed on the target chain."""
    symbol: str
    address: str
    decimals: int
    name: str


@dataclass(frozen=True, slots=True)
class TokenMetrics:
    """Market metrics for a single token, computed fresh per analysis pass."""
    price: float
    volume_24h: float
    price_change_24h: float
    liquidity_usd: float
    volatility: float
    volume_to_liquidity: float


class RiskProfile(str, Enum):
    HIGH = 'high'
    STANDARD = 'standard'


@dataclass(frozen=True, slots=True)
class AnalyzedToken(Token):
    """A token that passed its profitability policy."""
    risk_profile: RiskProfile
    metrics: TokenMetrics


@dataclass(frozen=True, slots=True)
class TradeResult:
    success: bool
    transaction_hash: str
    amount: float
    token_symbol: str
    minimum_amount_out: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ProfitabilityThresholds:
    """Volatility, turnover and policy limits used to classify tokens."""
    high_volatility: float = constants.HIGH_VOLATILITY_THRESHOLD
    high_turnover: float = constants.HIGH_TURNOVER_THRESHOLD
    relaxed_min_liquidity_usd: float = constants.RELAXED_MIN_LIQUIDITY_USD
    relaxed_min_volume_24h: float = constants.RELAXED_MIN_VOLUME_24H
    relaxed_max_price_change_24h: float = constants.RELAXED_MAX_PRICE_CHANGE_24H
    standard_min_liquidity_usd: float = constants.STANDARD_MIN_LIQUIDITY_USD
    standard_min_volume_24h: float = constants.STANDARD_MIN_VOLUME_24H
    standard_max_price_change_24h: float = constants.STANDARD_MAX_PRICE_CHANGE_24H
