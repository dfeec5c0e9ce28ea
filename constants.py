#!/usr/bin/env python3
from typing import Any, Dict, List, Union

# --- ANSI Color Codes ---
C_GREEN = '\033[92m'
C_RED = '\033[91m'
C_YELLOW = '\033[93m'
C_BLUE = '\033[94m'
C_RESET = '\033[0m'

# --- API Configuration ---
BASE_API_BASE_URL = 'https://mainnet.base.org/v1'
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_MAX_CONCURRENT_FETCHES = 8

# --- Environment Variable Names ---
TRADING_PRIVATE_KEY_ENV_VAR = 'TRADING_PRIVATE_KEY'
BASE_RPC_URL_ENV_VAR = 'BASE_RPC_URL'

# --- Chain Configuration ---
BASE_CHAIN_ID = 8453

CHAIN_CONFIG: Dict[int, Dict[str, Union[str, int]]] = {
    BASE_CHAIN_ID: {
        'name': 'base',
        'nativeSymbol': 'ETH',
        'tokenListUrl': 'https://raw.githubusercontent.com/ethereum-lists/tokens/master/tokens/base/tokens-base.json',
        'wrappedNativeAddress': '0x4200000000000000000000000000000000000006',
        'routerAddress': '0xaa8d210f7c34a056Bb573f15962673C5c24fbd10',
        'defaultRpcUrl': 'https://mainnet.base.org',
    },
}

# Served when the remote token list is unavailable.
FALLBACK_TOKENS: List[Dict[str, Any]] = [
    {
        'symbol': 'USDC',
        'address': '0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913',
        'decimals': 6,
        'name': 'USD Coin',
    },
    {
        'symbol': 'WETH',
        'address': '0x4200000000000000000000000000000000000006',
        'decimals': 18,
        'name': 'Wrapped Ether',
    },
    {
        'symbol': 'BTC',
        'address': '0x236aa50979D5f3De3Bd1Eeb40E81137F22ab794b',
        'decimals': 8,
        'name': 'Bitcoin',
    },
    {
        'symbol': 'SOL',
        'address': '0x1C6aE197fF4BF7BA96726FB6633cc0A8B0d169C8',
        'decimals': 9,
        'name': 'Solana',
    },
]

# --- Trade Execution Defaults ---
SLIPPAGE_TOLERANCE = 0.005  # 0.5%
SWAP_DEADLINE_SECONDS = 1800

# --- Profitability Heuristics ---
HIGH_VOLATILITY_THRESHOLD = 0.10  # 10% daily volatility
HIGH_TURNOVER_THRESHOLD = 0.50  # 50% daily volume/liquidity ratio
RELAXED_MIN_LIQUIDITY_USD = 25000.0
RELAXED_MIN_VOLUME_24H = 15000.0
RELAXED_MAX_PRICE_CHANGE_24H = -3.0
STANDARD_MIN_LIQUIDITY_USD = 100000.0
STANDARD_MIN_VOLUME_24H = 50000.0
STANDARD_MAX_PRICE_CHANGE_24H = 0.0

# --- Router ABI (Uniswap V2 style) ---
ROUTER_ABI: List[Dict[str, Any]] = [
    {
        "name": "swapExactTokensForTokens",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
    {
        "name": "swapExactETHForTokens",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
]
