# scenarios/full_cycle_scenario.py
"""
Fund -> deploy -> interact, for every wallet in the key file.

To run: python -m scenarios.full_cycle_scenario --config config.yaml
"""
import argparse
import sys

from devnet_interact_core.accounts import WalletManager
from devnet_interact_core.errors import ConfigError
from devnet_interact_core.workflow import build_services, process_wallet, run_wallets
from devnet_interact_core import config as core_config


def run_full_cycle_scenario(
    config_path: str = core_config.DEFAULT_CONFIG_FILE,
    key_file: str = core_config.DEFAULT_KEY_FILE,
    proxy_file: str = core_config.DEFAULT_PROXY_FILE
) -> int:
    """
    :return: Process exit code.
    """
    print("--- Starting Devnet Auto Deploy and Interact ---")

    # 1. Configuration
    try:
        config = core_config.load_run_config(config_path)
    except ConfigError as e:
        print(f"CRITICAL: {e}")
        return 1

    network = config['network']
    print(f"Network: {network['name']} (chain {network['chainId']})")
    print(f"Target RPC: {network['rpcUrl']}")
    print(f"Explorer: {network.get('explorerUrl', '')}")

    interact_only = bool(config['interaction'].get('onlyExisting')) or bool(config['deploy'].get('skipDeploy'))
    if interact_only:
        print("INFO: Running in interact-only mode (will skip contract deployment)")

    # 2. Wallets
    try:
        wallet_manager = WalletManager.from_files(
            key_file=key_file,
            proxy_file=proxy_file,
            rpc_url=network['rpcUrl'],
            chain_id=int(network['chainId']),
            client_options={
                'request_timeout': float(network['timeout']),
                'receipt_timeout': float(config['interaction']['receiptTimeout']),
            }
        )
    except ConfigError as e:
        print(f"CRITICAL: {e}")
        return 1
    if wallet_manager.wallet_count == 0:
        print("CRITICAL: No wallets could be initialized. Check your private keys.")
        return 1

    # 3. Services
    services = build_services(config)
    services.deployments.load_previous()

    # 4. Run
    run_wallets(wallet_manager.wallets, process_wallet, config, services)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Fund, deploy and interact with contracts on a devnet.")
    parser.add_argument('--config', default=core_config.DEFAULT_CONFIG_FILE, help="YAML run file")
    parser.add_argument('--keys', default=core_config.DEFAULT_KEY_FILE, help="Private key file, one key per line")
    parser.add_argument('--proxies', default=core_config.DEFAULT_PROXY_FILE, help="Optional proxy file, one proxy per line")
    args = parser.parse_args(argv)
    return run_full_cycle_scenario(args.config, args.keys, args.proxies)


if __name__ == "__main__":
    sys.exit(main())
