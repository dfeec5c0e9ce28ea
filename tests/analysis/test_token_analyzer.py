import asyncio

import pytest

from analysis.models import AnalyzedToken, ProfitabilityThresholds, RiskProfile, Token, TokenMetrics
from analysis.token_analyzer import MetricsPayloadError, TokenAnalyzer, build_metrics


def _token(symbol, address=None):
    return Token(symbol=symbol, address=address or f"0x{symbol.lower():0>40}", decimals=18, name=symbol)


def _metrics(**overrides):
    values = dict(
        price=1.0,
        volume_24h=0.0,
        price_change_24h=0.0,
        liquidity_usd=0.0,
        volatility=0.0,
        volume_to_liquidity=0.0,
    )
    values.update(overrides)
    return TokenMetrics(**values)


class FakeMetricsClient:
    def __init__(self, payloads, delays=None):
        self.payloads = payloads
        self.delays = delays or {}
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_metrics(self, token):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(token.symbol, 0))
            return self.payloads.get(token.symbol)
        finally:
            self.in_flight -= 1


def test_relaxed_policy_passes_high_risk_token():
    analyzer = TokenAnalyzer(FakeMetricsClient({}))
    metrics = _metrics(
        liquidity_usd=30000,
        volume_24h=20000,
        price_change_24h=-5,
        volatility=0.15,
        volume_to_liquidity=0.67,
    )

    result = analyzer.classify(_token("DEGEN"), metrics)

    assert isinstance(result, AnalyzedToken)
    assert result.risk_profile is RiskProfile.HIGH
    assert result.symbol == "DEGEN"
    assert result.metrics == metrics


def test_standard_policy_rejects_thin_liquidity():
    analyzer = TokenAnalyzer(FakeMetricsClient({}))
    metrics = _metrics(
        liquidity_usd=80000,
        volume_24h=60000,
        price_change_24h=-1,
        volatility=0.02,
        volume_to_liquidity=0.75,
    )

    assert analyzer.classify(_token("USDC"), metrics) is None


def test_standard_policy_passes_standard_token():
    analyzer = TokenAnalyzer(FakeMetricsClient({}))
    metrics = _metrics(
        liquidity_usd=150000,
        volume_24h=60000,
        price_change_24h=-0.5,
        volatility=0.02,
        volume_to_liquidity=0.4,
    )

    result = analyzer.classify(_token("AERO"), metrics)

    assert result is not None
    assert result.risk_profile is RiskProfile.STANDARD


def test_high_volatility_without_turnover_uses_standard_policy_but_high_profile():
    analyzer = TokenAnalyzer(FakeMetricsClient({}))
    metrics = _metrics(
        liquidity_usd=200000,
        volume_24h=60000,
        price_change_24h=-2,
        volatility=0.2,
        volume_to_liquidity=0.3,
    )

    result = analyzer.classify(_token("BRETT"), metrics)

    assert result is not None
    assert result.risk_profile is RiskProfile.HIGH


def test_relaxed_policy_requires_deeper_dip():
    analyzer = TokenAnalyzer(FakeMetricsClient({}))
    metrics = _metrics(
        liquidity_usd=30000,
        volume_24h=20000,
        price_change_24h=-2,
        volatility=0.15,
        volume_to_liquidity=0.67,
    )

    assert analyzer.classify(_token("DEGEN"), metrics) is None


def test_custom_thresholds_are_respected():
    thresholds = ProfitabilityThresholds(standard_min_liquidity_usd=50000)
    analyzer = TokenAnalyzer(FakeMetricsClient({}), thresholds)
    metrics = _metrics(liquidity_usd=80000, volume_24h=60000, price_change_24h=-1, volatility=0.02)

    assert analyzer.classify(_token("USDC"), metrics) is not None


def test_build_metrics_defaults_and_zero_liquidity():
    metrics = build_metrics({'price': 2.5, 'volume24h': 1000})

    assert metrics.price == 2.5
    assert metrics.liquidity_usd == 0
    assert metrics.volume_to_liquidity == 0
    assert metrics.volatility == 0


def test_build_metrics_derives_volatility_and_turnover():
    metrics = build_metrics({
        'price': 99,
        'volume24h': 20000,
        'priceChange24h': -5,
        'liquidityUSD': 40000,
        'historicalPrices': [100, 110, 99],
    })

    assert metrics.volume_to_liquidity == pytest.approx(0.5)
    assert metrics.volatility == pytest.approx(0.1)


def test_build_metrics_rejects_non_numeric_values():
    with pytest.raises(MetricsPayloadError):
        build_metrics({'price': 'n/a'})
    with pytest.raises(MetricsPayloadError):
        build_metrics({'historicalPrices': [1, 'x']})


@pytest.mark.asyncio
async def test_analyze_excludes_failed_fetches_and_keeps_order():
    payloads = {
        'GOOD': {
            'price': 1, 'volume24h': 60000, 'priceChange24h': -1,
            'liquidityUSD': 150000, 'historicalPrices': [1, 1.01, 1.0],
        },
        'ALSO': {
            'price': 1, 'volume24h': 70000, 'priceChange24h': -2,
            'liquidityUSD': 200000,
        },
        'FLAT': {
            'price': 1, 'volume24h': 70000, 'priceChange24h': 1,
            'liquidityUSD': 200000,
        },
        'JUNK': {'price': 'oops'},
    }
    client = FakeMetricsClient(payloads, delays={'GOOD': 0.02})
    analyzer = TokenAnalyzer(client)
    tokens = [_token('GOOD'), _token('MISSING'), _token('ALSO'), _token('FLAT'), _token('JUNK')]

    result = await analyzer.analyze(tokens)

    assert [token.symbol for token in result] == ['GOOD', 'ALSO']
    assert all(token.risk_profile is RiskProfile.STANDARD for token in result)


@pytest.mark.asyncio
async def test_analyze_bounds_concurrent_fetches():
    tokens = [_token(f"T{i}") for i in range(10)]
    client = FakeMetricsClient({}, delays={token.symbol: 0.01 for token in tokens})
    analyzer = TokenAnalyzer(client, max_concurrency=3)

    result = await analyzer.analyze(tokens)

    assert result == []
    assert client.max_in_flight == 3


def test_rejects_non_positive_concurrency():
    with pytest.raises(ValueError):
        TokenAnalyzer(FakeMetricsClient({}), max_concurrency=0)


@pytest.mark.parametrize("payload", [
    {'price': 10 ** 400},
    {'historicalPrices': [1, 10 ** 400]},
    {'historicalPrices': [1, 1e200, 1]},
    {'historicalPrices': [1, True, 2]},
    {'historicalPrices': [1, 'NaN', 2]},
    {'historicalPrices': [1, 'inf']},
])
def test_build_metrics_rejects_out_of_range_values(payload):
    with pytest.raises(MetricsPayloadError):
        build_metrics(payload)


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_payload", [
    {'price': 10 ** 400},
    {'historicalPrices': [1, 1e200, 1]},
])
async def test_analyze_skips_token_with_overflowing_metrics(bad_payload):
    payloads = {
        'GOOD': {'price': 1, 'volume24h': 60000, 'priceChange24h': -1, 'liquidityUSD': 150000},
        'HUGE': bad_payload,
    }
    analyzer = TokenAnalyzer(FakeMetricsClient(payloads))

    result = await analyzer.analyze([_token('GOOD'), _token('HUGE')])

    assert [token.symbol for token in result] == ['GOOD']


@pytest.mark.parametrize("volatility, turnover, liquidity, volume, change, passes", [
    # Volatility and turnover gates are strict: at the limit the standard policy applies.
    (0.10, 0.60, 30000, 20000, -5, False),
    (0.10, 0.60, 100000, 50000, -5, True),
    (0.15, 0.50, 30000, 20000, -5, False),
    (0.15, 0.50, 100000, 50000, -5, True),
    # Relaxed liquidity and volume floors are inclusive.
    (0.15, 0.60, 25000, 15000, -3.01, True),
    (0.15, 0.60, 24999.99, 15000, -5, False),
    (0.15, 0.60, 25000, 14999.99, -5, False),
    # Relaxed price change ceiling is strict.
    (0.15, 0.60, 25000, 15000, -3, False),
    # Standard liquidity and volume floors are inclusive.
    (0.02, 0.40, 100000, 50000, -0.01, True),
    (0.02, 0.40, 99999.99, 50000, -1, False),
    (0.02, 0.40, 100000, 49999.99, -1, False),
    # Standard price change ceiling is strict.
    (0.02, 0.40, 100000, 50000, 0, False),
])
def test_classify_threshold_boundaries(volatility, turnover, liquidity, volume, change, passes):
    analyzer = TokenAnalyzer(FakeMetricsClient({}))
    metrics = _metrics(
        liquidity_usd=liquidity,
        volume_24h=volume,
        price_change_24h=change,
        volatility=volatility,
        volume_to_liquidity=turnover,
    )

    result = analyzer.classify(_token("EDGE"), metrics)

    assert (result is not None) is passes
