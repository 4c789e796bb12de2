"""
Generate -> compile -> deploy -> record.
"""
from typing import Callable, Optional

from . import config as core_config
from .contracts.compiler import compile_contract
from .contracts.generator import ContractGenerator
from .deployments import DeploymentRecord, DeploymentStore
from .errors import DeploymentError


class DeployerService:
    """
    Deploys freshly generated contracts from a wallet and records them in the
    deployment store.
    """
    def __init__(self,
                 store: DeploymentStore,
                 generator: Optional[ContractGenerator] = None,
                 compiler: Callable = compile_contract,
                 solc_version: str = core_config.DEFAULT_SOLC_VERSION):
        self.store = store
        self.generator = generator or ContractGenerator()
        self.compiler = compiler
        self.solc_version = solc_version

    def deploy_contract(self, wallet, function_count: int = core_config.DEFAULT_FUNCTION_COUNT,
                        initial_value: int = core_config.DEFAULT_INITIAL_VALUE) -> DeploymentRecord:
        """
        :raises DeploymentError: If generation, compilation, or the deployment transaction fails.
        """
        print(f"INFO: Deploying contract with {function_count} functions from wallet: {wallet.address}")
        source = self.generator.generate_source(function_count)
        abi, bytecode = self.compiler(source, self.generator.contract_name, self.solc_version)

        print(f"INFO: Deploying contract with initial value: {initial_value}")
        try:
            receipt = wallet.client.deploy_contract(abi, bytecode, [initial_value], wallet.account)
        except Exception as e:
            raise DeploymentError(f"Contract deployment failed: {e}") from e

        if not receipt.contract_address:
            raise DeploymentError(f"Deployment {receipt.transaction_hash} has no contract address")

        record = DeploymentRecord.from_receipt(receipt, abi, wallet.address, function_count)
        self.store.save(record)
        return record
