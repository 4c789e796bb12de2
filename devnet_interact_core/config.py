# devnet_interact_core/config.py
"""
Default configuration values for the devnet interaction library.
These can be overridden by the YAML run file passed to the scenarios.
"""
import copy
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

# --- Network ---
DEFAULT_NETWORK_NAME: str = "Seismic devnet"
DEFAULT_RPC_URL: str = "https://node-2.seismicdev.net/rpc"
DEFAULT_CHAIN_ID: int = 5124
DEFAULT_EXPLORER_URL: str = "https://explorer-2.seismicdev.net/"
DEFAULT_RPC_TIMEOUT_SECONDS: float = 60.0

# --- Wallets ---
DEFAULT_CONFIG_FILE: str = './config.yaml'
DEFAULT_KEY_FILE: str = './pk.txt'        # One private key per line
DEFAULT_PROXY_FILE: str = './proxy.txt'   # Optional, one proxy per line, matched to keys by position
DEFAULT_MIN_BALANCE_ETH: float = 0.5      # Below this the faucet is claimed
DEFAULT_WALLET_DELAY_MS: int = 5000

# --- Faucet & captcha ---
DEFAULT_FAUCET_URL: str = "https://faucet-2.seismicdev.net/api/claim"
DEFAULT_FAUCET_REFERER: str = "https://faucet-2.seismicdev.net/"
DEFAULT_HCAPTCHA_SITEKEY: str = "0a76a396-7bf6-477e-947c-c77e66a8222e"
DEFAULT_NOCAPTCHA_URL: str = "http://api.nocaptcha.io"
DEFAULT_CAPTCHA_REGION: str = "sg"
DEFAULT_CAPTCHA_MAX_RETRIES: int = 3
DEFAULT_CAPTCHA_RETRY_DELAY_SECONDS: float = 3.0
DEFAULT_HTTP_TIMEOUT_SECONDS: float = 60.0
DEFAULT_FAUCET_MAX_RETRIES: int = 3

# --- Deployment ---
DEFAULT_CONTRACT_NAME: str = "MultiFunction"
DEFAULT_SOLC_VERSION: str = "0.8.19"
DEFAULT_FUNCTION_COUNT: int = 100
DEFAULT_INITIAL_VALUE: int = 100
DEFAULT_DEPLOY_MAX_RETRIES: int = 3
DEFAULT_DEPLOY_SHRINK_FACTOR: float = 0.8  # functionCount multiplier applied on each deploy retry
DEFAULT_DEPLOYMENTS_DIR: str = './deployments'

# --- Interaction ---
DEFAULT_INTERACTION_COUNT: int = 10
DEFAULT_INTERACTION_DELAY_MS: int = 1000
DEFAULT_RETRY_RATIO: float = 0.5          # Extra attempts allowed after the primary attempts, as a fraction of the target
DEFAULT_GAS_LIMIT: int = 500000           # Fixed upper gas bound for contract calls
DEFAULT_RECEIPT_TIMEOUT_SECONDS: float = 120.0
DEFAULT_INTERACTIONS_DIR: str = './interactions'

# Phase boundaries of the selection policy, as successCount / targetCount
WARMUP_PHASE_END: float = 0.3
STEADY_PHASE_END: float = 0.7

# Substrings (lower case) of function names favoured during warm-up
INITIALIZER_NAME_HINTS = ('set', 'init', 'add', 'increment')
# Substrings (lower case) of function names known to revert often
RISKY_NAME_HINTS = ('power', 'decrement', 'pop', 'divide')

# Contract priming before the interaction loop
INIT_BASELINE_FUNCTION: str = "setValue"
INIT_BASELINE_VALUE: int = 1000
INIT_KEY_FUNCTION: str = "setPublicNumber"
INIT_KEY_NAMES = ("init1", "init2", "init3", "init4", "init5")
INIT_KEY_VALUE: int = 500


DEFAULT_RUN_CONFIG: Dict[str, Any] = {
    "network": {
        "name": DEFAULT_NETWORK_NAME,
        "chainId": DEFAULT_CHAIN_ID,
        "rpcUrl": DEFAULT_RPC_URL,
        "explorerUrl": DEFAULT_EXPLORER_URL,
        "timeout": DEFAULT_RPC_TIMEOUT_SECONDS,
    },
    "minBalance": DEFAULT_MIN_BALANCE_ETH,
    "faucet": {
        "url": DEFAULT_FAUCET_URL,
        "refererUrl": DEFAULT_FAUCET_REFERER,
        "noCaptchaToken": "",
        "noCaptchaUrl": DEFAULT_NOCAPTCHA_URL,
        "hcaptchaSiteKey": DEFAULT_HCAPTCHA_SITEKEY,
        "faucetDelay": 3000,
        "confirmationDelay": 10000,
        "maxRetries": DEFAULT_FAUCET_MAX_RETRIES,
        "retryDelay": 5000,
        "defaultRegion": DEFAULT_CAPTCHA_REGION,
    },
    "deploy": {
        "count": 1,
        "functionCount": DEFAULT_FUNCTION_COUNT,
        "delay": 5000,
        "initialValue": DEFAULT_INITIAL_VALUE,
        "skipDeploy": False,
        "solcVersion": DEFAULT_SOLC_VERSION,
        "directory": DEFAULT_DEPLOYMENTS_DIR,
    },
    "interaction": {
        "count": DEFAULT_INTERACTION_COUNT,
        "delay": DEFAULT_INTERACTION_DELAY_MS,
        "onlyExisting": False,
        "initialize": True,
        "retryRatio": DEFAULT_RETRY_RATIO,
        "gasLimit": DEFAULT_GAS_LIMIT,
        "receiptTimeout": DEFAULT_RECEIPT_TIMEOUT_SECONDS,
        "directory": DEFAULT_INTERACTIONS_DIR,
    },
    "walletDelay": DEFAULT_WALLET_DELAY_MS,
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Returns a copy of `base` with `override` merged in, recursing into nested dicts.
    An empty section (YAML `key:` with no children) keeps the defaults.

    :raises ConfigError: If a section that defaults to a mapping is given a scalar or list.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict):
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ConfigError(f"Config section '{key}' must be a mapping, got {type(value).__name__}")
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_run_config(path: Optional[str] = DEFAULT_CONFIG_FILE) -> Dict[str, Any]:
    """
    Loads the YAML run file and merges it over DEFAULT_RUN_CONFIG.

    :param path: Path to the YAML file. None returns the defaults.
    :raises ConfigError: If the file is missing, unparsable, or not a mapping.
    """
    if path is None:
        return copy.deepcopy(DEFAULT_RUN_CONFIG)

    try:
        with open(path, 'r', encoding='utf-8') as config_file:
            loaded = yaml.safe_load(config_file)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}")

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level, got {type(loaded).__name__}")

    print(f"INFO: Loaded run configuration from {path}")
    return _deep_merge(DEFAULT_RUN_CONFIG, loaded)


def ms_to_seconds(value_ms: Any, default_ms: int = 0) -> float:
    """Converts a millisecond delay from the run file to seconds, falling back to `default_ms`."""
    if value_ms is None:
        value_ms = default_ms
    return float(value_ms) / 1000.0
