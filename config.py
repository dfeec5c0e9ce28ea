#!/usr/bin/env python3
import os
import argparse
from typing import NamedTuple

import constants
from analysis.models import ProfitabilityThresholds


class AppConfig(NamedTuple):
    """Typed configuration object."""
    chain_id: int
    amount: float
    rpc_url: str
    trading_private_key: str
    api_base_url: str
    request_timeout: float
    receipt_timeout: float
    max_concurrency: int
    slippage: float
    thresholds: ProfitabilityThresholds
    log_level: str


def load_config(argv: list[str] | None = None) -> AppConfig:
    """
    Parses command-line arguments and loads environment variables to create a configuration object.
    """
    parser = argparse.ArgumentParser(
        description="Find discounted tokens on Base and buy them with ETH.",
        epilog="Example: ./main.py --amount 0.05 --max-concurrency 4"
    )
    parser.add_argument('--amount', type=float, default=1.0, help='ETH to spend on each profitable token (default: 1).')
    parser.add_argument('--rpc-url', type=str, help=f'Base JSON-RPC endpoint (default: ${constants.BASE_RPC_URL_ENV_VAR} or the public Base RPC).')
    parser.add_argument('--api-base-url', type=str, default=constants.BASE_API_BASE_URL, help='Base metrics/quote API root.')
    parser.add_argument('--request-timeout', type=float, default=constants.DEFAULT_REQUEST_TIMEOUT, help='Seconds before an HTTP request is abandoned (default: 10).')
    parser.add_argument('--receipt-timeout', type=float, default=constants.DEFAULT_RECEIPT_TIMEOUT, help='Seconds to wait for a swap receipt (default: 120).')
    parser.add_argument('--max-concurrency', type=int, default=constants.DEFAULT_MAX_CONCURRENT_FETCHES, help='Concurrent metrics requests (default: 8).')
    parser.add_argument('--slippage', type=float, default=constants.SLIPPAGE_TOLERANCE * 100, help='Slippage tolerance percentage (default: 0.5).')

    # --- Profitability Thresholds ---
    parser.add_argument('--high-volatility', type=float, default=constants.HIGH_VOLATILITY_THRESHOLD, help='Volatility above which a token is high risk (default: 0.10).')
    parser.add_argument('--high-turnover', type=float, default=constants.HIGH_TURNOVER_THRESHOLD, help='Volume/liquidity ratio counted as high turnover (default: 0.50).')
    parser.add_argument('--min-liquidity', type=float, default=constants.STANDARD_MIN_LIQUIDITY_USD, help='Min USD liquidity for standard tokens (default: 100000).')
    parser.add_argument('--min-volume', type=float, default=constants.STANDARD_MIN_VOLUME_24H, help='Min 24h volume USD for standard tokens (default: 50000).')
    parser.add_argument('--relaxed-min-liquidity', type=float, default=constants.RELAXED_MIN_LIQUIDITY_USD, help='Min USD liquidity for high-volatility tokens (default: 25000).')
    parser.add_argument('--relaxed-min-volume', type=float, default=constants.RELAXED_MIN_VOLUME_24H, help='Min 24h volume USD for high-volatility tokens (default: 15000).')
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging verbosity (default: INFO).')

    args = parser.parse_args(argv)

    if args.amount <= 0:
        parser.error('--amount must be positive.')
    if args.max_concurrency <= 0:
        parser.error('--max-concurrency must be positive.')
    if not 0 <= args.slippage < 100:
        parser.error('--slippage must be between 0 and 100.')

    trading_private_key = os.environ.get(constants.TRADING_PRIVATE_KEY_ENV_VAR)
    if not trading_private_key:
        print(f"{constants.C_RED}{constants.TRADING_PRIVATE_KEY_ENV_VAR} environment variable not set; required for trading.{constants.C_RESET}")
        exit(1)

    rpc_url = (
        args.rpc_url
        or os.environ.get(constants.BASE_RPC_URL_ENV_VAR)
        or str(constants.CHAIN_CONFIG[constants.BASE_CHAIN_ID]['defaultRpcUrl'])
    )

    thresholds = ProfitabilityThresholds(
        high_volatility=args.high_volatility,
        high_turnover=args.high_turnover,
        relaxed_min_liquidity_usd=args.relaxed_min_liquidity,
        relaxed_min_volume_24h=args.relaxed_min_volume,
        standard_min_liquidity_usd=args.min_liquidity,
        standard_min_volume_24h=args.min_volume,
    )

    return AppConfig(
        chain_id=constants.BASE_CHAIN_ID,
        amount=args.amount,
        rpc_url=rpc_url,
        trading_private_key=trading_private_key,
        api_base_url=args.api_base_url,
        request_timeout=args.request_timeout,
        receipt_timeout=args.receipt_timeout,
        max_concurrency=args.max_concurrency,
        slippage=args.slippage / 100,
        thresholds=thresholds,
        log_level=args.log_level,
    )
