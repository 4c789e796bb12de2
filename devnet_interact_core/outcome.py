"""
Defines the records produced by contract calls and interaction batches.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from web3 import Web3

STATUS_SUCCESS = 'success'
STATUS_FAILED = 'failed'


def json_safe(value: Any) -> Any:
    """Hex-encodes bytes (recursing into arrays) so argument values survive json.dump."""
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(bytes(value))
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    return value


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-10-18T03:34:00.123Z."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class Receipt:
    """
    Confirmation record for a mined transaction.
    """
    def __init__(self,
                 transaction_hash: str,
                 block_number: Optional[int],
                 gas_used: Optional[int],
                 status: int = 1,
                 contract_address: Optional[str] = None # Only set for deployments
                ):
        self.transaction_hash: str = transaction_hash
        self.block_number: Optional[int] = block_number
        self.gas_used: Optional[int] = gas_used
        self.status: int = status
        self.contract_address: Optional[str] = contract_address

    def __repr__(self) -> str:
        return (f"Receipt(hash='{self.transaction_hash}', block={self.block_number}, "
                f"gas_used={self.gas_used}, status={self.status})")


class InteractionOutcome:
    """
    The result of one interaction attempt. Created once per logged attempt and
    not modified afterwards.
    """
    def __init__(self,
                 interaction_id: int,
                 function_name: Optional[str],
                 arguments: List[Any],
                 status: str,
                 transaction_hash: Optional[str] = None,
                 block_number: Optional[int] = None,
                 gas_used: Optional[str] = None,
                 error: Optional[str] = None,
                 timestamp: Optional[str] = None
                ):
        if status not in (STATUS_SUCCESS, STATUS_FAILED):
            raise ValueError(f"Unknown interaction status: {status}")
        self.interaction_id: int = interaction_id
        self.function_name: Optional[str] = function_name
        self.arguments: List[Any] = list(arguments)
        self.status: str = status
        self.transaction_hash: Optional[str] = transaction_hash
        self.block_number: Optional[int] = block_number
        self.gas_used: Optional[str] = gas_used
        self.error: Optional[str] = error
        self.timestamp: str = timestamp or utc_timestamp()

    @classmethod
    def succeeded(cls, interaction_id: int, function_name: str, arguments: List[Any], receipt: Receipt) -> 'InteractionOutcome':
        return cls(
            interaction_id=interaction_id,
            function_name=function_name,
            arguments=arguments,
            status=STATUS_SUCCESS,
            transaction_hash=receipt.transaction_hash,
            block_number=receipt.block_number,
            gas_used=str(receipt.gas_used) if receipt.gas_used is not None else None
        )

    @classmethod
    def failed(cls, interaction_id: int, function_name: Optional[str], arguments: List[Any], error: str) -> 'InteractionOutcome':
        return cls(
            interaction_id=interaction_id,
            function_name=function_name,
            arguments=arguments,
            status=STATUS_FAILED,
            error=error
        )

    @property
    def is_success(self) -> bool:
        return self.status == STATUS_SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form, using the field names of the interaction log files."""
        record: Dict[str, Any] = {
            'interactionId': self.interaction_id,
            'function': self.function_name,
            'arguments': [json_safe(arg) for arg in self.arguments],
            'status': self.status,
            'timestamp': self.timestamp,
        }
        if self.is_success:
            record['transactionHash'] = self.transaction_hash
            record['blockNumber'] = self.block_number
            record['gasUsed'] = self.gas_used
        else:
            record['error'] = self.error
        return record

    def __repr__(self) -> str:
        return (f"InteractionOutcome(id={self.interaction_id}, fn='{self.function_name}', "
                f"status={self.status}, hash='{self.transaction_hash}')")


class InteractionBatchResult:
    """
    Returned by the interaction driver for one contract: the target count,
    how many calls succeeded, and every logged outcome in order.
    """
    def __init__(self, total: int, successful: int, results: List[InteractionOutcome]):
        self.total: int = total
        self.successful: int = successful
        self.results: List[InteractionOutcome] = results

    @classmethod
    def empty(cls, total: int) -> 'InteractionBatchResult':
        return cls(total=total, successful=0, results=[])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'successful': self.successful,
            'results': [outcome.to_dict() for outcome in self.results],
        }

    def __repr__(self) -> str:
        return f"InteractionBatchResult(successful={self.successful}/{self.total}, logged={len(self.results)})"


class ProgressState:
    """
    Loop-local counters of one interaction batch. Never persisted or shared.
    """
    def __init__(self, target_count: int, retry_budget: int):
        self.target_count: int = target_count
        self.success_count: int = 0
        self.attempt_index: int = 0
        self.retries_left: int = retry_budget
        self.total_attempts: int = 0 # Every call issued, primary or retry

    @property
    def in_primary_budget(self) -> bool:
        """True while attempts still count against the target (i.e. are logged)."""
        return self.attempt_index < self.target_count

    @property
    def success_ratio(self) -> float:
        if self.target_count <= 0:
            return 1.0
        return self.success_count / self.target_count

    def should_continue(self) -> bool:
        return (self.success_count < self.target_count and
                (self.attempt_index < self.target_count or self.retries_left > 0))

    def __repr__(self) -> str:
        return (f"ProgressState(success={self.success_count}/{self.target_count}, "
                f"attempt_index={self.attempt_index}, retries_left={self.retries_left})")
