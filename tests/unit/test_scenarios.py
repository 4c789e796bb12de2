from unittest.mock import patch

from scenarios import full_cycle_scenario, interact_only_scenario

KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


def write_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "deploy:\n"
        f"  directory: {tmp_path / 'deployments'}\n"
        "interaction:\n"
        f"  directory: {tmp_path / 'interactions'}\n"
        "walletDelay: 0\n"
    )
    return str(path)


def test_interact_only_requires_previous_deployments(tmp_path, capsys):
    exit_code = interact_only_scenario.main(["--config", write_config(tmp_path),
                                             "--keys", str(tmp_path / "pk.txt")])

    assert exit_code == 1
    assert "No deployed contracts found in the deployments folder" in capsys.readouterr().out


def test_full_cycle_fails_on_missing_config(tmp_path, capsys):
    assert full_cycle_scenario.main(["--config", str(tmp_path / "absent.yaml")]) == 1
    assert "CRITICAL: Config file not found" in capsys.readouterr().out


def test_full_cycle_fails_on_missing_keys(tmp_path, capsys):
    assert full_cycle_scenario.main(["--config", write_config(tmp_path), "--keys", str(tmp_path / "pk.txt")]) == 1
    assert "CRITICAL: Key file not found" in capsys.readouterr().out


@patch('scenarios.full_cycle_scenario.run_wallets')
def test_full_cycle_runs_every_wallet(mock_run_wallets, tmp_path):
    keys = tmp_path / "pk.txt"
    keys.write_text(f"{KEY}\n")

    exit_code = full_cycle_scenario.run_full_cycle_scenario(write_config(tmp_path), str(keys),
                                                           str(tmp_path / "proxy.txt"))

    assert exit_code == 0
    wallets, processor, config, services = mock_run_wallets.call_args.args
    assert len(wallets) == 1
    assert processor is full_cycle_scenario.process_wallet
    assert services.deployer is not None
    assert wallets[0].client.rpc_url == config['network']['rpcUrl']


def test_full_cycle_accepts_empty_config_sections(tmp_path, capsys):
    path = tmp_path / "config.yaml"
    path.write_text(
        "deploy:\n"
        f"  directory: {tmp_path / 'deployments'}\n"
        "interaction:\n"
        "  # count: 10\n"
        "walletDelay: 0\n"
    )

    assert full_cycle_scenario.main(["--config", str(path), "--keys", str(tmp_path / "pk.txt")]) == 1
    assert "CRITICAL: Key file not found" in capsys.readouterr().out
