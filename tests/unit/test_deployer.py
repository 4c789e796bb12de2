import random
import re
from unittest.mock import Mock, patch

import pytest

from devnet_interact_core.contracts import compiler
from devnet_interact_core.contracts.generator import (COMPLEX_FUNCTION_TEMPLATES, FUNCTION_TEMPLATES,
                                                     MAX_COMPLEX_FUNCTIONS, ContractGenerator)
from devnet_interact_core.deployer import DeployerService
from devnet_interact_core.deployments import DeploymentStore
from devnet_interact_core.errors import DeploymentError
from devnet_interact_core.outcome import Receipt

ABI = [{'type': 'function', 'name': 'setValue', 'inputs': [{'name': 'v', 'type': 'uint256'}],
        'stateMutability': 'nonpayable'}]
CONTRACT = "0x" + "cd" * 20


@pytest.fixture
def wallet():
    wallet = Mock()
    wallet.address = "0x" + "ab" * 20
    wallet.client.deploy_contract.return_value = Receipt("0x" + "aa" * 32, 3, 1_200_000, contract_address=CONTRACT)
    return wallet


@pytest.fixture
def store():
    return Mock(spec=DeploymentStore)


def test_generated_source_has_header_and_unique_functions():
    source = ContractGenerator(rng=random.Random(3)).generate_source(40)

    assert "contract MultiFunction {" in source
    assert "function setValue(uint256 newValue)" in source
    assert "function setPublicNumber(string memory key, uint256 newValue)" in source
    names = re.findall(r'function (\w+)\(', source)
    assert len(names) == len(set(names))
    assert source.rstrip().endswith("}")


def test_generated_names_use_template_types():
    names = ContractGenerator(rng=random.Random(9))._function_names(25)
    assert len(names) == 25
    assert all(name.startswith(function_type) for function_type, name in names)
    assert all(function_type in FUNCTION_TEMPLATES or function_type in COMPLEX_FUNCTION_TEMPLATES
               for function_type, _ in names)
    assert sum(1 for function_type, _ in names if function_type == 'store') <= MAX_COMPLEX_FUNCTIONS


def test_store_functions_are_capped():
    names = ContractGenerator(rng=random.Random(4), complex_chance=1.0)._function_names(10)
    types = [function_type for function_type, _ in names]
    assert types[:MAX_COMPLEX_FUNCTIONS] == ['store'] * MAX_COMPLEX_FUNCTIONS
    assert 'store' not in types[MAX_COMPLEX_FUNCTIONS:]


def test_store_template_takes_user_key_and_amount():
    source = ContractGenerator(rng=random.Random(4), complex_chance=1.0).generate_source(1)
    assert re.search(r'function store\w+\(address user, string memory key, uint256 amount\) public', source)


def test_deploy_contract_records_deployment(wallet, store):
    compile_fn = Mock(return_value=(ABI, "0x6080"))
    deployer = DeployerService(store, ContractGenerator(rng=random.Random(1)), compiler=compile_fn, solc_version="0.8.19")

    record = deployer.deploy_contract(wallet, function_count=5, initial_value=42)

    assert compile_fn.call_args.args[1:] == ("MultiFunction", "0.8.19")
    wallet.client.deploy_contract.assert_called_once_with(ABI, "0x6080", [42], wallet.account)
    assert record.address == CONTRACT
    assert record.function_count == 5
    assert record.gas_used == "1200000"
    store.save.assert_called_once_with(record)


def test_deploy_failure_is_wrapped(wallet, store):
    wallet.client.deploy_contract.side_effect = ValueError("insufficient funds for gas")
    deployer = DeployerService(store, compiler=Mock(return_value=(ABI, "0x6080")))

    with pytest.raises(DeploymentError, match="insufficient funds"):
        deployer.deploy_contract(wallet, 3)
    store.save.assert_not_called()


def test_missing_contract_address_rejected(wallet, store):
    wallet.client.deploy_contract.return_value = Receipt("0x" + "aa" * 32, 3, 1)
    deployer = DeployerService(store, compiler=Mock(return_value=(ABI, "0x6080")))

    with pytest.raises(DeploymentError, match="no contract address"):
        deployer.deploy_contract(wallet, 3)


def test_compile_errors_propagate_from_compiler(wallet, store):
    deployer = DeployerService(store, compiler=Mock(side_effect=DeploymentError("Compilation error: boom")))
    with pytest.raises(DeploymentError, match="boom"):
        deployer.deploy_contract(wallet, 3)
    wallet.client.deploy_contract.assert_not_called()


@patch.object(compiler.solcx, 'get_installed_solc_versions', return_value=['0.8.19'])
@patch.object(compiler.solcx, 'install_solc')
class TestCompileContract:
    def test_returns_abi_and_bytecode(self, mock_install, mock_installed):
        output = {'contracts': {compiler.SOURCE_FILENAME: {'MultiFunction': {
            'abi': ABI, 'evm': {'bytecode': {'object': '6080'}}}}}}
        with patch.object(compiler.solcx, 'compile_standard', return_value=output) as mock_compile:
            abi, bytecode = compiler.compile_contract("contract MultiFunction {}", "MultiFunction", "0.8.19")

        assert abi == ABI and bytecode == '6080'
        mock_install.assert_not_called()
        assert mock_compile.call_args.kwargs['solc_version'] == "0.8.19"

    def test_installs_missing_version(self, mock_install, mock_installed):
        compiler.ensure_solc("0.8.20")
        mock_install.assert_called_once_with("0.8.20")

    def test_error_diagnostics_raise(self, mock_install, mock_installed):
        output = {'errors': [{'severity': 'error', 'message': 'ParserError: Expected ;'}], 'contracts': {}}
        with patch.object(compiler.solcx, 'compile_standard', return_value=output):
            with pytest.raises(DeploymentError, match="ParserError"):
                compiler.compile_contract("contract", "MultiFunction")

    def test_missing_contract_raises(self, mock_install, mock_installed, capsys):
        output = {'errors': [{'severity': 'warning', 'message': 'unused'}], 'contracts': {compiler.SOURCE_FILENAME: {}}}
        with patch.object(compiler.solcx, 'compile_standard', return_value=output):
            with pytest.raises(DeploymentError, match="missing from compiler output"):
                compiler.compile_contract("contract Other {}", "MultiFunction")
        assert "WARN: Compilation produced 1 warning(s)" in capsys.readouterr().out
