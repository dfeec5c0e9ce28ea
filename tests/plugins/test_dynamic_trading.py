from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from analysis.models import AnalyzedToken, RiskProfile, Token, TokenMetrics, TradeResult
from fake_http import FakeSession
from plugins.dynamic_trading import (
    DynamicTradingPlugin,
    TradeFailure,
    format_summary,
    format_trade_outcome,
)
from services.quote_client import QuoteError
from services.trade_executor import TradeExecutionError

METRICS = TokenMetrics(
    price=1.0,
    volume_24h=60000,
    price_change_24h=-1,
    liquidity_usd=150000,
    volatility=0.02,
    volume_to_liquidity=0.4,
)


def _analyzed(symbol):
    return AnalyzedToken(
        symbol=symbol,
        address=f"0x{symbol.lower():0>40}",
        decimals=18,
        name=symbol,
        risk_profile=RiskProfile.STANDARD,
        metrics=METRICS,
    )


def _plugin(profitable, execute):
    token_list_client = MagicMock()
    token_list_client.list_tokens = AsyncMock(return_value=(Token('X', '0x1', 18, 'X'),))
    analyzer = MagicMock()
    analyzer.analyze = AsyncMock(return_value=profitable)
    executor = MagicMock()
    executor.execute = AsyncMock(side_effect=execute)
    return DynamicTradingPlugin(token_list_client, analyzer, executor), executor


def test_plugin_metadata():
    plugin, _ = _plugin([], [])

    assert plugin.name == "Dynamic Base Trading"
    assert plugin.supports_chain(8453)
    assert plugin.supports_chain({'id': 8453})
    assert not plugin.supports_chain(1)
    assert plugin.supports_smart_wallets()


@pytest.mark.asyncio
async def test_tool_trades_every_profitable_token_sequentially():
    wallet = MagicMock()

    async def execute(wallet_arg, token, amount):
        return TradeResult(True, f"0x{token.symbol.lower()}", amount, token.symbol)

    plugin, executor = _plugin([_analyzed('AERO'), _analyzed('DEGEN')], execute)
    tools = await plugin.get_tools(wallet)

    assert [tool.name for tool in tools] == ['find_and_trade_base_tokens']
    summary = await tools[0].invoke({'amount': 0.25})

    assert summary.splitlines() == [
        "Trades executed: 2 succeeded, 0 failed",
        "- Bought AERO with 0.25 ETH (tx 0xaero)",
        "- Bought DEGEN with 0.25 ETH (tx 0xdegen)",
    ]
    assert [call.args[1].symbol for call in executor.execute.await_args_list] == ['AERO', 'DEGEN']
    assert all(call.args[0] is wallet for call in executor.execute.await_args_list)
    plugin.token_list_client.list_tokens.assert_awaited_once_with(8453)


@pytest.mark.asyncio
async def test_tool_defaults_amount_to_one():
    async def execute(wallet_arg, token, amount):
        return TradeResult(True, "0x1", amount, token.symbol)

    plugin, executor = _plugin([_analyzed('AERO')], execute)
    tool = (await plugin.get_tools(MagicMock()))[0]

    await tool.invoke()
    await tool.invoke({'amount': None})

    assert [call.args[2] for call in executor.execute.await_args_list] == [1.0, 1.0]


@pytest.mark.asyncio
async def test_tool_rejects_non_positive_amount():
    plugin, executor = _plugin([_analyzed('AERO')], [])
    tool = (await plugin.get_tools(MagicMock()))[0]

    with pytest.raises(ValidationError):
        await tool.invoke({'amount': 0})
    executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_trade_is_reported_and_batch_continues():
    async def execute(wallet_arg, token, amount):
        if token.symbol == 'AERO':
            raise TradeExecutionError('AERO', QuoteError('quote request failed: HTTP 500'))
        return TradeResult(True, "0xdegen", amount, token.symbol)

    plugin, executor = _plugin([_analyzed('AERO'), _analyzed('DEGEN')], execute)

    summary = await plugin.find_and_trade(MagicMock(), 1)

    assert summary.splitlines() == [
        "Trades executed: 1 succeeded, 1 failed",
        "- FAILED AERO: quote request failed: HTTP 500",
        "- Bought DEGEN with 1 ETH (tx 0xdegen)",
    ]
    assert executor.execute.await_count == 2


@pytest.mark.asyncio
async def test_no_profitable_tokens_message():
    plugin, executor = _plugin([], [])

    summary = await plugin.find_and_trade(MagicMock())

    assert summary == "No profitable tokens found on Base; no trades executed."
    executor.execute.assert_not_awaited()


def test_format_trade_outcome_renders_failure():
    assert format_trade_outcome(TradeFailure('SOL', 'timed out')) == "- FAILED SOL: timed out"
    assert format_summary([]).startswith("No profitable tokens")


@pytest.mark.asyncio
async def test_from_session_wires_http_collaborators():
    session = FakeSession({})
    plugin = DynamicTradingPlugin.from_session(session, max_concurrency=2, slippage_tolerance=0.01)

    assert plugin.analyzer.max_concurrency == 2
    assert plugin.executor.minimum_amount_out(1000) == 990

    # Every remote call fails: fallback tokens, no metrics, nothing traded.
    summary = await plugin.find_and_trade(MagicMock())
    assert summary.startswith("No profitable tokens")


def test_supports_chain_follows_configured_chain():
    plugin = DynamicTradingPlugin(MagicMock(), MagicMock(), MagicMock(), chain_id=84532)

    assert plugin.supports_chain(84532)
    assert plugin.supports_chain({'id': 84532})
    assert not plugin.supports_chain(8453)
