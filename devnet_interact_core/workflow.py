# devnet_interact_core/workflow.py
"""
Per-wallet orchestration: fund, deploy, interact. Wallets, contracts and
interactions are all processed strictly one after another.
"""
import time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from . import config as core_config
from .accounts import Wallet
from .deployer import DeployerService
from .deployments import DeploymentRecord, DeploymentStore
from .errors import DeploymentError
from .faucet import FaucetClient
from .interaction import InteractionDriver
from .recorder import InteractionRecorder
from .strategies.phased_selection import PhasedSelectionStrategy
from .submitter import TransactionSubmitter

BANNER = '=' * 50


class Services:
    """The collaborators a wallet run needs. `faucet` and `deployer` may be None in interaction-only mode."""
    def __init__(self,
                 interaction: InteractionDriver,
                 deployments: DeploymentStore,
                 deployer: Optional[DeployerService] = None,
                 faucet: Optional[FaucetClient] = None):
        self.interaction = interaction
        self.deployments = deployments
        self.deployer = deployer
        self.faucet = faucet


def build_services(config: Dict[str, Any], interaction_only: bool = False) -> Services:
    """Wires the default collaborators from a merged run configuration."""
    interaction_config = config['interaction']
    deploy_config = config['deploy']

    driver = InteractionDriver(
        selection_strategy=PhasedSelectionStrategy(),
        submitter=TransactionSubmitter(gas_limit=int(interaction_config['gasLimit'])),
        recorder=InteractionRecorder(interaction_config['directory']),
        inter_delay=core_config.ms_to_seconds(interaction_config.get('delay'), core_config.DEFAULT_INTERACTION_DELAY_MS),
        retry_ratio=float(interaction_config['retryRatio']),
        initialize_contract=bool(interaction_config.get('initialize', True)),
    )
    deployments = DeploymentStore(deploy_config['directory'])
    if interaction_only:
        return Services(interaction=driver, deployments=deployments)

    deployer = DeployerService(deployments, solc_version=deploy_config['solcVersion'])
    faucet = FaucetClient.from_config(config['faucet'])
    return Services(interaction=driver, deployments=deployments, deployer=deployer, faucet=faucet)


def ensure_funded(wallet: Wallet, config: Dict[str, Any], services: Services, balance: Decimal) -> bool:
    """
    Claims from the faucet when `balance` is under minBalance.

    :return: False when the wallet cannot proceed (claim failed and the balance is zero).
    """
    min_balance = Decimal(str(config.get('minBalance', core_config.DEFAULT_MIN_BALANCE_ETH)))
    if balance >= min_balance:
        return True
    if services.faucet is None:
        print(f"WARN: Balance {balance} is under {min_balance} and no faucet is configured.")
        return balance > 0

    print(f"INFO: Balance too low ({balance} < {min_balance}), claiming from faucet...")
    claim = services.faucet.claim(wallet.address, wallet.proxy)
    if not claim.success:
        print(f"ERROR: Failed to claim from faucet: {claim.error}")
        if balance == 0:
            print("ERROR: Cannot proceed with zero balance. Skipping this wallet.")
            return False
        return True

    print("INFO: Waiting for faucet transaction to be mined...")
    time.sleep(core_config.ms_to_seconds(config['faucet'].get('confirmationDelay'), 10000))
    print(f"INFO: New balance after faucet claim: {wallet.get_balance()} ETH")
    return True


def deploy_with_retries(wallet: Wallet, config: Dict[str, Any], services: Services) -> List[DeploymentRecord]:
    """
    Deploys deploy.count contracts. Each gets up to DEFAULT_DEPLOY_MAX_RETRIES
    attempts, the function count shrinking by 20% on every retry.
    """
    deploy_config = config['deploy']
    deploy_count = int(deploy_config.get('count') or 1)
    deployed: List[DeploymentRecord] = []

    for index in range(deploy_count):
        print(f"\n--- Deploying contract {index + 1}/{deploy_count} ---")
        function_count = int(deploy_config.get('functionCount') or core_config.DEFAULT_FUNCTION_COUNT)
        initial_value = int(deploy_config.get('initialValue', core_config.DEFAULT_INITIAL_VALUE))

        record: Optional[DeploymentRecord] = None
        for attempt in range(1, core_config.DEFAULT_DEPLOY_MAX_RETRIES + 1):
            if attempt > 1:
                function_count = int(function_count * core_config.DEFAULT_DEPLOY_SHRINK_FACTOR)
                print(f"INFO: Retrying with reduced function count: {function_count}")
            try:
                record = services.deployer.deploy_contract(wallet, function_count, initial_value)
                break
            except DeploymentError as e:
                if attempt < core_config.DEFAULT_DEPLOY_MAX_RETRIES:
                    print(f"WARN: Failed deployment attempt {attempt}/{core_config.DEFAULT_DEPLOY_MAX_RETRIES}: {e}")
                else:
                    print(f"ERROR: Failed to deploy contract {index + 1} after "
                          f"{core_config.DEFAULT_DEPLOY_MAX_RETRIES} attempts: {e}")

        if record is None:
            continue
        print(f"INFO: Contract deployed successfully at {record.address}")
        deployed.append(record)

        if index < deploy_count - 1:
            deploy_delay = core_config.ms_to_seconds(deploy_config.get('delay'), 5000)
            print(f"INFO: Waiting {deploy_delay:g}s before next deployment...")
            time.sleep(deploy_delay)

    return deployed


def interact_with_contracts(wallet: Wallet, contracts: List[DeploymentRecord],
                            config: Dict[str, Any], services: Services) -> None:
    interaction_config = config['interaction']
    interaction_count = int(interaction_config.get('count') or core_config.DEFAULT_INTERACTION_COUNT)
    contract_delay = core_config.ms_to_seconds(interaction_config.get('delay'), 2000)

    for contract in contracts:
        print(f"\n--- Interacting with contract: {contract.address} ---")
        try:
            if contract.block_number is not None:
                print(f"INFO: Contract deployed at block {contract.block_number}")
            batch_result = services.interaction.interact(wallet, contract, interaction_count)
            print(f"INFO: Completed {batch_result.successful}/{batch_result.total} interactions")
        except Exception as e:
            print(f"ERROR: Failed to perform interactions with contract {contract.address}: {e}")

        print(f"INFO: Waiting {contract_delay:g}s before next contract...")
        time.sleep(contract_delay)


def process_wallet(wallet: Wallet, config: Dict[str, Any], services: Services) -> None:
    """Full cycle for one wallet. Errors are logged; the next wallet still runs."""
    try:
        print(f"\n{BANNER}")
        print(f"INFO: Processing wallet: {wallet.address}")
        print(BANNER)

        initial_balance = wallet.get_balance()
        print(f"INFO: Initial balance: {initial_balance} ETH")
        if not ensure_funded(wallet, config, services, initial_balance):
            return

        only_existing = bool(config['interaction'].get('onlyExisting'))
        skip_deploy = bool(config['deploy'].get('skipDeploy'))
        contracts: List[DeploymentRecord] = []

        if skip_deploy or only_existing:
            print("INFO: Skipping deployment, using existing contracts...")
            contracts = services.deployments.by_wallet(wallet.address)
            if contracts:
                print(f"INFO: Found {len(contracts)} existing contracts for this wallet.")
            elif only_existing:
                print("WARN: No existing contracts found for this wallet. Cannot proceed in interact-only mode.")
                return
            else:
                print("WARN: No existing contracts found for this wallet. Will deploy new contracts.")

        if not contracts:
            if services.deployer is None:
                print("WARN: No deployer configured. Skipping deployment.")
            else:
                contracts = deploy_with_retries(wallet, config, services)

        if not contracts:
            print("WARN: No contracts were deployed successfully. Skipping interaction step.")
        else:
            interact_with_contracts(wallet, contracts, config, services)

        print(f"\nINFO: Final balance: {wallet.get_balance()} ETH")
        print(f"INFO: Wallet {wallet.address} processing completed")
    except Exception as e:
        print(f"ERROR: Error processing wallet {wallet.address}: {e}")


def interact_with_existing_contracts(wallet: Wallet, config: Dict[str, Any], services: Services) -> None:
    """Interaction-only cycle: no faucet, no deployment."""
    try:
        print(f"\n{BANNER}")
        print(f"INFO: Processing wallet: {wallet.address} (Interaction only mode)")
        print(BANNER)
        print(f"INFO: Current balance: {wallet.get_balance()} ETH")

        contracts = services.deployments.by_wallet(wallet.address)
        if not contracts:
            print(f"WARN: No deployed contracts found for wallet {wallet.address}. Skipping.")
            return
        print(f"INFO: Found {len(contracts)} deployed contracts for this wallet")

        interact_with_contracts(wallet, contracts, config, services)

        print(f"\nINFO: Final balance: {wallet.get_balance()} ETH")
        print(f"INFO: Wallet {wallet.address} processing completed")
    except Exception as e:
        print(f"ERROR: Error processing wallet {wallet.address}: {e}")


WalletProcessor = Callable[[Wallet, Dict[str, Any], Services], None]


def run_wallets(wallets: List[Wallet], processor: WalletProcessor,
                config: Dict[str, Any], services: Services) -> None:
    """Runs `processor` over every wallet in order, pausing walletDelay between them."""
    wallet_delay = core_config.ms_to_seconds(config.get('walletDelay'), core_config.DEFAULT_WALLET_DELAY_MS)
    for index, wallet in enumerate(wallets):
        processor(wallet, config, services)
        if index < len(wallets) - 1:
            print(f"INFO: Waiting {wallet_delay:g}s before processing next wallet...")
            time.sleep(wallet_delay)
    print("\nINFO: All wallet processing completed")
