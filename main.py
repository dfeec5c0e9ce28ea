#!/usr/bin/env python3
import asyncio
import logging

import aiohttp

import constants
from config import AppConfig, load_config
from plugins.dynamic_trading import DynamicTradingPlugin
from services.wallet import Web3WalletClient


async def run(config: AppConfig) -> str:
    """Runs the trading tool once against Base and returns its summary."""
    wallet = Web3WalletClient(
        config.rpc_url,
        config.trading_private_key,
        receipt_timeout=config.receipt_timeout,
    )
    async with aiohttp.ClientSession(headers={'User-Agent': 'DynamicBaseTrading/1.0'}) as session:
        plugin = DynamicTradingPlugin.from_session(
            session,
            api_base_url=config.api_base_url,
            request_timeout=config.request_timeout,
            receipt_timeout=config.receipt_timeout,
            max_concurrency=config.max_concurrency,
            slippage_tolerance=config.slippage,
            thresholds=config.thresholds,
        )
        if not plugin.supports_chain(config.chain_id):
            raise RuntimeError(f"{plugin.name} does not support chain {config.chain_id}")
        tools = await plugin.get_tools(wallet)
        return await tools[0].invoke({'amount': config.amount})


def main() -> None:
    """The main synchronous entry point for the application."""
    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        summary = asyncio.run(run(config))
    except RuntimeError as exc:
        print(f"{constants.C_RED}{exc}{constants.C_RESET}")
        exit(1)
    print(f"{constants.C_GREEN}{summary}{constants.C_RESET}")


if __name__ == "__main__":
    main()
