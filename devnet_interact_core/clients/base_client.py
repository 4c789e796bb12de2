import abc
from decimal import Decimal
from typing import Any, Dict, List, Optional

from web3 import Web3

from ..outcome import Receipt


class ILedgerClient(abc.ABC):
    """
    Abstract Base Class defining the interface the interaction driver, the
    deployer and the wallet model use to talk to the ledger. Every call
    blocks until the node answers; timeouts are the implementation's concern.
    """

    def __init__(self, rpc_url: str, chain_id: int, proxy: Optional[str] = None, **kwargs):
        """
        Args:
            rpc_url: The JSON-RPC endpoint (e.g., "https://node-2.seismicdev.net/rpc").
            chain_id: Chain ID placed in every signed transaction.
            proxy: Optional HTTP(S) proxy URL for RPC traffic.
            **kwargs: Implementation-specific options.
        """
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.proxy = proxy
        self.w3: Optional[Web3] = None
        self._client_kwargs = kwargs

    @abc.abstractmethod
    def is_connected(self) -> bool:
        pass

    @abc.abstractmethod
    def get_balance(self, address: str) -> Decimal:
        """Balance of `address` in ether."""
        pass

    @abc.abstractmethod
    def get_current_gas_prices(self) -> Dict[str, int]:
        """
        Returns a dictionary with 'gasPrice' and, where the chain supports
        EIP-1559, 'maxFeePerGas' and 'maxPriorityFeePerGas'.
        """
        pass

    @abc.abstractmethod
    def get_contract(self, address: str, abi: List[Dict[str, Any]]) -> Any:
        """Returns a contract object bound to `address`."""
        pass

    @abc.abstractmethod
    def submit_call(self, contract_function: Any, account: Any, gas_limit: int) -> Receipt:
        """
        Signs and sends a bound contract function call from `account`, then
        waits for one confirmation.

        Raises:
            TransactionReverted: The transaction was mined with status 0.
            Exception: Whatever the underlying client raises for invalid
                arguments, RPC failures or receipt timeouts.
        """
        pass

    @abc.abstractmethod
    def deploy_contract(self, abi: List[Dict[str, Any]], bytecode: str,
                        constructor_args: List[Any], account: Any) -> Receipt:
        """Deploys a contract and waits for the receipt; `contract_address` is set on success."""
        pass
