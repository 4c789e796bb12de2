"""
Compiles generated Solidity with py-solc-x.
"""
from typing import Any, Dict, List, Tuple

import solcx

from .. import config as core_config
from ..errors import DeploymentError

SOURCE_FILENAME = 'contract.sol'


def ensure_solc(version: str = core_config.DEFAULT_SOLC_VERSION) -> None:
    """Installs the requested solc version on first use."""
    installed = {str(v) for v in solcx.get_installed_solc_versions()}
    if version not in installed:
        print(f"INFO: Installing solc {version}...")
        solcx.install_solc(version)


def compile_contract(source: str,
                     contract_name: str = core_config.DEFAULT_CONTRACT_NAME,
                     solc_version: str = core_config.DEFAULT_SOLC_VERSION
                    ) -> Tuple[List[Dict[str, Any]], str]:
    """
    :return: (abi, bytecode) of `contract_name`.
    :raises DeploymentError: On compiler errors or if the contract is missing from the output.
    """
    print("INFO: Compiling contract...")
    try:
        ensure_solc(solc_version)
        output = solcx.compile_standard(
            {
                "language": "Solidity",
                "sources": {SOURCE_FILENAME: {"content": source}},
                "settings": {"outputSelection": {"*": {"*": ["abi", "evm.bytecode"]}}},
            },
            solc_version=solc_version,
        )
    except solcx.exceptions.SolcError as e:
        raise DeploymentError(f"Compilation error: {e}") from e

    diagnostics = output.get('errors', [])
    errors = [d for d in diagnostics if d.get('severity', d.get('type')) in ('error', 'Error')]
    if errors:
        raise DeploymentError("Compilation error: " + '\n'.join(d.get('message', '') for d in errors))
    if diagnostics:
        print(f"WARN: Compilation produced {len(diagnostics)} warning(s)")

    try:
        contract_output = output['contracts'][SOURCE_FILENAME][contract_name]
        return contract_output['abi'], contract_output['evm']['bytecode']['object']
    except KeyError as e:
        raise DeploymentError(f"Contract {contract_name} missing from compiler output: {e}") from e
