"""
Binds a deployed contract to its catalog and submits named calls against it.
"""
from typing import Any, Callable, Dict, List, Optional, Sequence

from . import config as core_config
from .catalog import FunctionDescriptor, write_functions
from .errors import SubmissionError
from .outcome import Receipt

Invocation = Callable[[Sequence[Any]], Any]


def _bind(contract: Any, function_name: str) -> Invocation:
    def invoke(args: Sequence[Any]) -> Any:
        return contract.functions[function_name](*args)
    return invoke


class ContractHandle:
    """
    A deployed contract as seen from one wallet. The dispatch table maps each
    writable function name to a closure producing the bound call, and is built
    once from the catalog.
    """
    def __init__(self, address: str, contract: Any, catalog: Sequence[FunctionDescriptor], wallet: Any):
        self.address: str = address
        self.contract = contract
        self.catalog: List[FunctionDescriptor] = list(catalog)
        self.wallet = wallet
        self.dispatch: Dict[str, Invocation] = {
            fn.name: _bind(contract, fn.name) for fn in write_functions(self.catalog)
        }

    @classmethod
    def from_deployment(cls, wallet: Any, address: str, abi: List[Dict[str, Any]],
                        catalog: Sequence[FunctionDescriptor]) -> 'ContractHandle':
        contract = wallet.client.get_contract(address, abi)
        return cls(address, contract, catalog, wallet)

    def is_writable(self, function_name: str) -> bool:
        return function_name in self.dispatch

    def bind(self, function_name: str, args: Sequence[Any]) -> Any:
        invocation = self.dispatch.get(function_name)
        if invocation is None:
            raise SubmissionError(f"{function_name} is not a writable function of {self.address}", function_name)
        return invocation(args)

    def __repr__(self) -> str:
        return f"ContractHandle(address='{self.address}', writable={len(self.dispatch)})"


class TransactionSubmitter:
    """
    Sends one named call and blocks until it is confirmed. Either a Receipt is
    returned or SubmissionError is raised; no pending state leaks out.
    """
    def __init__(self, gas_limit: int = core_config.DEFAULT_GAS_LIMIT):
        self.gas_limit = gas_limit

    def submit(self, handle: ContractHandle, function_name: str, args: Sequence[Any]) -> Receipt:
        try:
            # Binding validates argument types against the ABI
            contract_function = handle.bind(function_name, args)
            return handle.wallet.client.submit_call(contract_function, handle.wallet.account, self.gas_limit)
        except SubmissionError:
            raise
        except Exception as e:
            raise SubmissionError(str(e) or type(e).__name__, function_name) from e

    def try_submit(self, handle: ContractHandle, function_name: str,
                   args: Sequence[Any]) -> 'SubmissionResult':
        """Like submit, but the failure comes back as a value instead of an exception."""
        try:
            return SubmissionResult(receipt=self.submit(handle, function_name, args))
        except SubmissionError as e:
            return SubmissionResult(error=e)


class SubmissionResult:
    """Either a receipt or the SubmissionError that prevented one."""
    def __init__(self, receipt: Optional[Receipt] = None, error: Optional[SubmissionError] = None):
        if (receipt is None) == (error is None):
            raise ValueError("SubmissionResult needs exactly one of receipt or error")
        self.receipt = receipt
        self.error = error

    @property
    def ok(self) -> bool:
        return self.receipt is not None

    def __repr__(self) -> str:
        return f"SubmissionResult(receipt={self.receipt}, error={self.error!r})"
