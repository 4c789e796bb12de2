import pytest

from devnet_interact_core import config as core_config
from devnet_interact_core.errors import ConfigError


def test_defaults_without_path():
    config = core_config.load_run_config(None)
    assert config == core_config.DEFAULT_RUN_CONFIG
    assert config is not core_config.DEFAULT_RUN_CONFIG
    config['interaction']['count'] = 99
    assert core_config.DEFAULT_RUN_CONFIG['interaction']['count'] == core_config.DEFAULT_INTERACTION_COUNT


def test_yaml_is_merged_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "network:\n"
        "  rpcUrl: http://127.0.0.1:8545\n"
        "interaction:\n"
        "  count: 25\n"
        "  retryRatio: 1.0\n"
        "walletDelay: 0\n"
    )
    config = core_config.load_run_config(str(path))

    assert config['network']['rpcUrl'] == "http://127.0.0.1:8545"
    assert config['network']['chainId'] == core_config.DEFAULT_CHAIN_ID
    assert config['interaction']['count'] == 25
    assert config['interaction']['retryRatio'] == 1.0
    assert config['interaction']['gasLimit'] == core_config.DEFAULT_GAS_LIMIT
    assert config['walletDelay'] == 0


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert core_config.load_run_config(str(path)) == core_config.DEFAULT_RUN_CONFIG


@pytest.mark.parametrize("content", ["- just\n- a list\n", "network: [unclosed\n"])
def test_invalid_yaml_raises(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(ConfigError):
        core_config.load_run_config(str(path))


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        core_config.load_run_config(str(tmp_path / "absent.yaml"))


def test_ms_to_seconds():
    assert core_config.ms_to_seconds(1500) == 1.5
    assert core_config.ms_to_seconds(None, 2000) == 2.0
    assert core_config.ms_to_seconds("250") == 0.25


def test_empty_section_keeps_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("interaction:\n  # count: 10\nfaucet:\nwalletDelay: 0\n")

    config = core_config.load_run_config(str(path))

    assert config['interaction'] == core_config.DEFAULT_RUN_CONFIG['interaction']
    assert config['faucet'] == core_config.DEFAULT_RUN_CONFIG['faucet']
    assert config['walletDelay'] == 0


@pytest.mark.parametrize("content", ["interaction: 10\n", "deploy:\n  - count\n", "network:\n  rpcUrl: [a, b]\ndeploy: yes\n"])
def test_non_mapping_section_raises(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(ConfigError, match="must be a mapping"):
        core_config.load_run_config(str(path))
