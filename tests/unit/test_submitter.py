from unittest.mock import MagicMock, Mock

import pytest

from devnet_interact_core.catalog import build_catalog
from devnet_interact_core.clients.base_client import ILedgerClient
from devnet_interact_core.errors import SubmissionError, TransactionReverted
from devnet_interact_core.outcome import Receipt
from devnet_interact_core.submitter import ContractHandle, SubmissionResult, TransactionSubmitter

ABI = [
    {'type': 'function', 'name': 'setValue', 'inputs': [{'name': 'v', 'type': 'uint256'}],
     'outputs': [], 'stateMutability': 'nonpayable'},
    {'type': 'function', 'name': 'getValue', 'inputs': [], 'outputs': [{'name': '', 'type': 'uint256'}],
     'stateMutability': 'view'},
]
ADDRESS = "0x" + "cd" * 20


@pytest.fixture
def wallet():
    wallet = Mock()
    wallet.address = "0x" + "ab" * 20
    wallet.client = Mock(spec=ILedgerClient)
    wallet.client.submit_call.return_value = Receipt("0x" + "01" * 32, 12, 30000)
    return wallet


@pytest.fixture
def handle(wallet):
    return ContractHandle(ADDRESS, MagicMock(), build_catalog(ABI), wallet)


def test_dispatch_covers_writable_functions_only(handle):
    assert set(handle.dispatch) == {'setValue'}
    assert handle.is_writable('setValue')
    assert not handle.is_writable('getValue')


def test_submit_binds_and_sends(handle, wallet):
    receipt = TransactionSubmitter(gas_limit=123456).submit(handle, 'setValue', [7])

    assert receipt.block_number == 12
    handle.contract.functions.__getitem__.assert_called_with('setValue')
    bound_call = handle.contract.functions.__getitem__.return_value
    bound_call.assert_called_once_with(7)
    wallet.client.submit_call.assert_called_once_with(bound_call.return_value, wallet.account, 123456)


@pytest.mark.parametrize("name", ['getValue', 'missingFunction'])
def test_unknown_or_read_only_function_rejected(handle, wallet, name):
    with pytest.raises(SubmissionError) as excinfo:
        TransactionSubmitter().submit(handle, name, [])
    assert excinfo.value.function_name == name
    wallet.client.submit_call.assert_not_called()


def test_ledger_errors_become_submission_errors(handle, wallet):
    wallet.client.submit_call.side_effect = TransactionReverted("0xdead", 99)

    with pytest.raises(SubmissionError) as excinfo:
        TransactionSubmitter().submit(handle, 'setValue', [1])

    assert "0xdead" in excinfo.value.message
    assert isinstance(excinfo.value.__cause__, TransactionReverted)


def test_argument_encoding_errors_become_submission_errors(handle):
    handle.contract.functions.__getitem__.return_value.side_effect = TypeError("Could not identify the intended function")

    with pytest.raises(SubmissionError, match="intended function"):
        TransactionSubmitter().submit(handle, 'setValue', ['not-a-number'])


def test_try_submit_returns_values(handle, wallet):
    ok = TransactionSubmitter().try_submit(handle, 'setValue', [1])
    assert ok.ok and ok.receipt.gas_used == 30000

    wallet.client.submit_call.side_effect = TimeoutError()
    failed = TransactionSubmitter().try_submit(handle, 'setValue', [1])
    assert not failed.ok
    assert failed.error.message == "TimeoutError"


def test_submission_result_requires_exactly_one():
    with pytest.raises(ValueError):
        SubmissionResult()
    with pytest.raises(ValueError):
        SubmissionResult(receipt=Receipt("0x1", 1, 1), error=SubmissionError("x"))


def test_from_deployment_uses_wallet_client(wallet):
    contract = MagicMock()
    wallet.client.get_contract.return_value = contract

    handle = ContractHandle.from_deployment(wallet, ADDRESS, ABI, build_catalog(ABI))

    wallet.client.get_contract.assert_called_once_with(ADDRESS, ABI)
    assert handle.contract is contract
