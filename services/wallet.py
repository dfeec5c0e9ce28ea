#!/usr/bin/env python3
"""Wallet capability interfaces and a web3.py-backed implementation."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from web3 import Web3

from constants import DEFAULT_RECEIPT_TIMEOUT


@dataclass(frozen=True, slots=True)
class TransactionReceipt:
    transaction_hash: str
    block_number: Optional[int] = None
    status: Optional[int] = None


class PendingTransaction(Protocol):
    async def wait(self) -> TransactionReceipt: ...


class SwapRouter(Protocol):
    async def swap_exact_eth_for_tokens(
        self,
        amount_out_min: int,
        path: Sequence[str],
        recipient: str,
        deadline: int,
        *,
        value: int,
    ) -> PendingTransaction: ...


class WalletClient(Protocol):
    """The two wallet capabilities trade execution depends on."""

    async def get_contract(self, address: str, abi: List[Dict[str, Any]]) -> SwapRouter: ...

    async def get_address(self) -> str: ...


class Web3PendingTransaction:
    def __init__(self, web3: Web3, tx_hash: Any, timeout: float) -> None:
        self._web3 = web3
        self._tx_hash = tx_hash
        self._timeout = timeout

    @property
    def hash(self) -> str:
        return Web3.to_hex(self._tx_hash)

    async def wait(self) -> TransactionReceipt:
        receipt = await asyncio.to_thread(
            self._web3.eth.wait_for_transaction_receipt, self._tx_hash, timeout=self._timeout
        )
        return TransactionReceipt(
            transaction_hash=Web3.to_hex(receipt['transactionHash']),
            block_number=receipt.get('blockNumber'),
            status=receipt.get('status'),
        )


class Web3RouterContract:
    """Router handle that signs and broadcasts swaps from the wallet account."""

    def __init__(self, wallet: "Web3WalletClient", contract: Any) -> None:
        self._wallet = wallet
        self._contract = contract

    async def swap_exact_eth_for_tokens(
        self,
        amount_out_min: int,
        path: Sequence[str],
        recipient: str,
        deadline: int,
        *,
        value: int,
    ) -> Web3PendingTransaction:
        return await asyncio.to_thread(
            self._send_swap_sync, amount_out_min, list(path), recipient, deadline, value
        )

    def _send_swap_sync(
        self, amount_out_min: int, path: List[str], recipient: str, deadline: int, value: int
    ) -> Web3PendingTransaction:
        web3 = self._wallet.web3
        account = self._wallet.account
        checksum_path = [web3.to_checksum_address(address) for address in path]
        tx = self._contract.functions.swapExactETHForTokens(
            amount_out_min,
            checksum_path,
            web3.to_checksum_address(recipient),
            deadline,
        ).build_transaction({
            'from': account.address,
            'value': value,
            'nonce': web3.eth.get_transaction_count(account.address),
            'chainId': web3.eth.chain_id,
        })
        signed = account.sign_transaction(tx)
        tx_hash = web3.eth.send_raw_transaction(signed.raw_transaction)
        pending = Web3PendingTransaction(web3, tx_hash, self._wallet.receipt_timeout)
        self._wallet.logger.info("Swap submitted: %s", pending.hash)
        return pending


class Web3WalletClient:
    """Wallet backed by a local private key and an HTTP JSON-RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        private_key: str,
        *,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
        web3: Optional[Web3] = None,
    ) -> None:
        self.web3 = web3 or Web3(Web3.HTTPProvider(rpc_url))
        if not self.web3.is_connected():
            raise RuntimeError(f"Could not connect to RPC URL: {rpc_url}")

        self.account = self.web3.eth.account.from_key(private_key)
        self.receipt_timeout = receipt_timeout
        self.logger = logger or logging.getLogger(__name__)

    async def get_contract(self, address: str, abi: List[Dict[str, Any]]) -> Web3RouterContract:
        contract = self.web3.eth.contract(address=self.web3.to_checksum_address(address), abi=abi)
        return Web3RouterContract(self, contract)

    async def get_address(self) -> str:
        return self.account.address
