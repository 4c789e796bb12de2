# scenarios/interact_only_scenario.py
"""
Interaction-only mode: reuse the contracts recorded under deployments/,
no faucet claims and no new deployments.

To run: python -m scenarios.interact_only_scenario --config config.yaml
"""
import argparse
import sys

from devnet_interact_core.accounts import WalletManager
from devnet_interact_core.errors import ConfigError
from devnet_interact_core.workflow import build_services, interact_with_existing_contracts, run_wallets
from devnet_interact_core import config as core_config


def run_interact_only_scenario(
    config_path: str = core_config.DEFAULT_CONFIG_FILE,
    key_file: str = core_config.DEFAULT_KEY_FILE,
    proxy_file: str = core_config.DEFAULT_PROXY_FILE
) -> int:
    print("--- Starting Devnet Auto Interact Only Mode ---")

    try:
        config = core_config.load_run_config(config_path)
    except ConfigError as e:
        print(f"CRITICAL: {e}")
        return 1

    # Force interaction-only mode regardless of the run file
    config['deploy']['skipDeploy'] = True
    config['interaction']['onlyExisting'] = True

    services = build_services(config, interaction_only=True)
    if not services.deployments.load_previous():
        print("ERROR: No deployed contracts found in the deployments folder. "
              "Cannot proceed with interaction-only mode.")
        return 1

    network = config['network']
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

    run_wallets(wallet_manager.wallets, interact_with_existing_contracts, config, services)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Interact with previously deployed contracts.")
    parser.add_argument('--config', default=core_config.DEFAULT_CONFIG_FILE, help="YAML run file")
    parser.add_argument('--keys', default=core_config.DEFAULT_KEY_FILE, help="Private key file, one key per line")
    parser.add_argument('--proxies', default=core_config.DEFAULT_PROXY_FILE, help="Optional proxy file, one proxy per line")
    args = parser.parse_args(argv)
    return run_interact_only_scenario(args.config, args.keys, args.proxies)


if __name__ == "__main__":
    sys.exit(main())
