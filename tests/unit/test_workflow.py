import copy
from decimal import Decimal
from unittest.mock import Mock, call, patch

import pytest

from devnet_interact_core import config as core_config
from devnet_interact_core.deployer import DeployerService
from devnet_interact_core.deployments import DeploymentRecord, DeploymentStore
from devnet_interact_core.errors import DeploymentError
from devnet_interact_core.faucet import FaucetClaimResult, FaucetClient
from devnet_interact_core.interaction import InteractionDriver
from devnet_interact_core.outcome import InteractionBatchResult
from devnet_interact_core.workflow import (Services, build_services, deploy_with_retries, ensure_funded,
                                           interact_with_existing_contracts, process_wallet, run_wallets)

WALLET_ADDRESS = "0x" + "ab" * 20


@pytest.fixture(autouse=True)
def no_sleep():
    with patch('devnet_interact_core.workflow.time.sleep', return_value=None) as mock_sleep:
        yield mock_sleep


@pytest.fixture
def run_config(tmp_path):
    config = copy.deepcopy(core_config.DEFAULT_RUN_CONFIG)
    config['deploy']['directory'] = str(tmp_path / "deployments")
    config['interaction']['directory'] = str(tmp_path / "interactions")
    config['interaction']['count'] = 4
    return config


@pytest.fixture
def wallet():
    wallet = Mock()
    wallet.address = WALLET_ADDRESS
    wallet.proxy = None
    wallet.get_balance.return_value = Decimal("2")
    return wallet


@pytest.fixture
def services():
    interaction = Mock(spec=InteractionDriver)
    interaction.interact.return_value = InteractionBatchResult(total=4, successful=4, results=[])
    return Services(
        interaction=interaction,
        deployments=Mock(spec=DeploymentStore),
        deployer=Mock(spec=DeployerService),
        faucet=Mock(spec=FaucetClient),
    )


def record(address="0x" + "cd" * 20):
    return DeploymentRecord(address=address, abi=[], wallet=WALLET_ADDRESS, block_number=10)


def test_build_services(run_config):
    services = build_services(run_config)
    assert isinstance(services.interaction, InteractionDriver)
    assert services.interaction.retry_ratio == core_config.DEFAULT_RETRY_RATIO
    assert services.interaction.submitter.gas_limit == core_config.DEFAULT_GAS_LIMIT
    assert services.deployer is not None and services.faucet is not None

    interaction_only = build_services(run_config, interaction_only=True)
    assert interaction_only.deployer is None and interaction_only.faucet is None


class TestEnsureFunded:
    def test_enough_balance_skips_faucet(self, wallet, run_config, services):
        assert ensure_funded(wallet, run_config, services, Decimal("1"))
        services.faucet.claim.assert_not_called()

    def test_low_balance_claims(self, wallet, run_config, services):
        services.faucet.claim.return_value = FaucetClaimResult(True, tx_hash="0x1")
        assert ensure_funded(wallet, run_config, services, Decimal("0.1"))
        services.faucet.claim.assert_called_once_with(WALLET_ADDRESS, None)

    def test_failed_claim_with_zero_balance_stops(self, wallet, run_config, services, capsys):
        services.faucet.claim.return_value = FaucetClaimResult(False, error="captcha")
        assert not ensure_funded(wallet, run_config, services, Decimal("0"))
        assert "ERROR: Cannot proceed with zero balance" in capsys.readouterr().out

    def test_failed_claim_with_some_balance_continues(self, wallet, run_config, services):
        services.faucet.claim.return_value = FaucetClaimResult(False, error="captcha")
        assert ensure_funded(wallet, run_config, services, Decimal("0.01"))


def test_deploy_retries_shrink_function_count(wallet, run_config, services):
    run_config['deploy']['functionCount'] = 100
    services.deployer.deploy_contract.side_effect = [DeploymentError("gas"), DeploymentError("gas"), record()]

    deployed = deploy_with_retries(wallet, run_config, services)

    assert [r.address for r in deployed] == ["0x" + "cd" * 20]
    counts = [c.args[1] for c in services.deployer.deploy_contract.call_args_list]
    assert counts == [100, 80, 64]


def test_deploy_gives_up_after_three_attempts(wallet, run_config, services, capsys):
    run_config['deploy']['count'] = 2
    services.deployer.deploy_contract.side_effect = [DeploymentError("x")] * 3 + [record()]

    deployed = deploy_with_retries(wallet, run_config, services)

    assert len(deployed) == 1
    assert services.deployer.deploy_contract.call_count == 4
    assert "ERROR: Failed to deploy contract 1 after 3 attempts" in capsys.readouterr().out


def test_process_wallet_full_cycle(wallet, run_config, services):
    services.deployer.deploy_contract.return_value = record()

    process_wallet(wallet, run_config, services)

    services.faucet.claim.assert_not_called()
    services.interaction.interact.assert_called_once_with(wallet, services.deployer.deploy_contract.return_value, 4)


def test_process_wallet_reuses_existing_contracts(wallet, run_config, services):
    run_config['deploy']['skipDeploy'] = True
    existing = [record("0x" + "01" * 20), record("0x" + "02" * 20)]
    services.deployments.by_wallet.return_value = existing

    process_wallet(wallet, run_config, services)

    services.deployer.deploy_contract.assert_not_called()
    assert services.interaction.interact.call_args_list == [call(wallet, existing[0], 4), call(wallet, existing[1], 4)]


def test_process_wallet_only_existing_without_contracts(wallet, run_config, services, capsys):
    run_config['interaction']['onlyExisting'] = True
    services.deployments.by_wallet.return_value = []

    process_wallet(wallet, run_config, services)

    services.deployer.deploy_contract.assert_not_called()
    services.interaction.interact.assert_not_called()
    assert "Cannot proceed in interact-only mode" in capsys.readouterr().out


def test_process_wallet_skips_unfunded_wallet(wallet, run_config, services):
    wallet.get_balance.return_value = Decimal("0")
    services.faucet.claim.return_value = FaucetClaimResult(False, error="captcha")

    process_wallet(wallet, run_config, services)

    services.deployer.deploy_contract.assert_not_called()


def test_process_wallet_logs_unexpected_errors(wallet, run_config, services, capsys):
    wallet.get_balance.side_effect = ConnectionError("rpc down")
    process_wallet(wallet, run_config, services)
    assert f"ERROR: Error processing wallet {WALLET_ADDRESS}: rpc down" in capsys.readouterr().out


def test_interaction_errors_do_not_stop_other_contracts(wallet, run_config, services, capsys):
    run_config['deploy']['skipDeploy'] = True
    services.deployments.by_wallet.return_value = [record("0x" + "01" * 20), record("0x" + "02" * 20)]
    services.interaction.interact.side_effect = [ValueError("bad abi"),
                                                 InteractionBatchResult(total=4, successful=3, results=[])]

    process_wallet(wallet, run_config, services)

    out = capsys.readouterr().out
    assert "ERROR: Failed to perform interactions with contract" in out
    assert "INFO: Completed 3/4 interactions" in out


def test_interact_with_existing_contracts(wallet, run_config, services):
    services.deployments.by_wallet.return_value = [record()]
    interact_with_existing_contracts(wallet, run_config, services)
    services.faucet.claim.assert_not_called()
    services.interaction.interact.assert_called_once()


def test_run_wallets_waits_between_wallets(run_config, services, no_sleep):
    run_config['walletDelay'] = 2500
    processor = Mock()
    wallets = [Mock(), Mock(), Mock()]

    run_wallets(wallets, processor, run_config, services)

    assert [c.args[0] for c in processor.call_args_list] == wallets
    assert no_sleep.call_args_list == [call(2.5), call(2.5)]
