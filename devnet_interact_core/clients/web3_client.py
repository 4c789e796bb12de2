"""
web3.py implementation of the ledger client: HTTP JSON-RPC, locally signed
transactions, one-confirmation receipts.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from web3 import Web3
from web3.types import TxParams

from .. import config as core_config
from ..errors import TransactionReverted
from ..outcome import Receipt
from .base_client import ILedgerClient


def _to_hex(value: Any) -> str:
    if isinstance(value, str):
        return value if value.startswith('0x') else f"0x{value}"
    return Web3.to_hex(value)


def receipt_from_web3(raw_receipt: Any) -> Receipt:
    """Converts a web3 receipt (AttributeDict) into a Receipt."""
    return Receipt(
        transaction_hash=_to_hex(raw_receipt['transactionHash']),
        block_number=raw_receipt.get('blockNumber'),
        gas_used=raw_receipt.get('gasUsed'),
        status=raw_receipt.get('status', 1),
        contract_address=raw_receipt.get('contractAddress')
    )


class Web3LedgerClient(ILedgerClient):
    """
    Ledger client backed by web3.py's HTTPProvider.
    """
    def __init__(self,
                 rpc_url: str = core_config.DEFAULT_RPC_URL,
                 chain_id: int = core_config.DEFAULT_CHAIN_ID,
                 proxy: Optional[str] = None,
                 request_timeout: float = core_config.DEFAULT_RPC_TIMEOUT_SECONDS,
                 receipt_timeout: float = core_config.DEFAULT_RECEIPT_TIMEOUT_SECONDS,
                 w3: Optional[Web3] = None,
                 **kwargs):
        super().__init__(rpc_url, chain_id, proxy, **kwargs)
        self.request_timeout = request_timeout
        self.receipt_timeout = receipt_timeout
        self.w3 = w3 if w3 is not None else self._build_web3()

    def _build_web3(self) -> Web3:
        request_kwargs: Dict[str, Any] = {'timeout': self.request_timeout}
        if self.proxy:
            request_kwargs['proxies'] = {'http': self.proxy, 'https': self.proxy}
        return Web3(Web3.HTTPProvider(self.rpc_url, request_kwargs=request_kwargs))

    def is_connected(self) -> bool:
        try:
            return bool(self.w3.is_connected())
        except Exception as e:
            print(f"WARN: Connection check against {self.rpc_url} failed: {e}")
            return False

    def get_balance(self, address: str) -> Decimal:
        balance_wei = self.w3.eth.get_balance(Web3.to_checksum_address(address))
        return Decimal(Web3.from_wei(balance_wei, 'ether'))

    def get_current_gas_prices(self) -> Dict[str, int]:
        gas_prices: Dict[str, int] = {}
        try:
            gas_prices['gasPrice'] = self.w3.eth.gas_price
        except Exception as e:
            print(f"WARN: Could not fetch legacy gas price: {e}")
            gas_prices['gasPrice'] = 0

        try:
            latest_block = self.w3.eth.get_block('latest')
            base_fee_per_gas = latest_block.get('baseFeePerGas')
            if base_fee_per_gas is not None:
                priority_fee = self.w3.eth.max_priority_fee
                # Headroom for two base-fee increases before the tx lands
                gas_prices['maxFeePerGas'] = base_fee_per_gas * 2 + priority_fee
                gas_prices['maxPriorityFeePerGas'] = priority_fee
        except Exception as e:
            print(f"WARN: Could not fetch EIP-1559 gas prices, using legacy pricing: {e}")

        return gas_prices

    def _base_tx_params(self, sender_address: str) -> TxParams:
        params: TxParams = {
            'from': sender_address,
            'nonce': self.w3.eth.get_transaction_count(sender_address, 'pending'),
            'chainId': self.chain_id,
            'value': 0,
        }
        gas_prices = self.get_current_gas_prices()
        if 'maxFeePerGas' in gas_prices:
            params['maxFeePerGas'] = gas_prices['maxFeePerGas']
            params['maxPriorityFeePerGas'] = gas_prices['maxPriorityFeePerGas']
        else:
            params['gasPrice'] = gas_prices['gasPrice']
        return params

    def _sign_send_and_wait(self, transaction: TxParams, account: Any) -> Receipt:
        signed_transaction = account.sign_transaction(transaction)
        tx_hash_bytes = self.w3.eth.send_raw_transaction(signed_transaction.raw_transaction)
        raw_receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash_bytes, timeout=self.receipt_timeout)
        receipt = receipt_from_web3(raw_receipt)
        if receipt.status == 0:
            raise TransactionReverted(receipt.transaction_hash, receipt.block_number)
        return receipt

    def get_contract(self, address: str, abi: List[Dict[str, Any]]) -> Any:
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def submit_call(self, contract_function: Any, account: Any, gas_limit: int) -> Receipt:
        params = self._base_tx_params(account.address)
        # A fixed gas bound skips estimation, which fails outright on calls that would revert
        params['gas'] = gas_limit
        transaction = contract_function.build_transaction(params)
        return self._sign_send_and_wait(transaction, account)

    def deploy_contract(self, abi: List[Dict[str, Any]], bytecode: str,
                        constructor_args: List[Any], account: Any) -> Receipt:
        factory = self.w3.eth.contract(abi=abi, bytecode=bytecode)
        params = self._base_tx_params(account.address)
        transaction = factory.constructor(*constructor_args).build_transaction(params)
        receipt = self._sign_send_and_wait(transaction, account)
        print(f"INFO: Contract deployed at {receipt.contract_address} (gas used: {receipt.gas_used})")
        return receipt
