"""
Loads private keys and proxies, and builds the wallets a run iterates over.
"""
import re
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
from eth_account import Account

from . import config as core_config
from .clients.base_client import ILedgerClient
from .clients.web3_client import Web3LedgerClient
from .errors import ConfigError

_PRIVATE_KEY_PATTERN = re.compile(r'^(0x)?[0-9a-fA-F]{64}$')
_PROXY_CREDENTIALS = re.compile(r'//[^/@]*@')


def mask_proxy(proxy: Optional[str]) -> Optional[str]:
    """Hides proxy credentials for log output."""
    if proxy is None:
        return None
    return _PROXY_CREDENTIALS.sub('//***@', proxy)


def _read_lines(file_path: str, column: str) -> List[str]:
    """Reads a one-value-per-line text file, ignoring blank lines and '#' comments."""
    frame = pd.read_csv(file_path, header=None, names=[column], dtype=str,
                        comment='#', skip_blank_lines=True, sep='\t', quoting=3)
    return [value.strip() for value in frame[column].dropna() if value.strip()]


def load_private_keys(file_path: str = core_config.DEFAULT_KEY_FILE) -> List[str]:
    """
    Loads private keys from a text file, one per line.

    :raises ConfigError: If the file is missing or yields no valid key.
    """
    try:
        raw_keys = _read_lines(file_path, 'priv_key')
    except FileNotFoundError:
        raise ConfigError(f"Key file not found: {file_path}")
    except pd.errors.EmptyDataError:
        raw_keys = []

    keys: List[str] = []
    for line_number, raw_key in enumerate(raw_keys, start=1):
        if not _PRIVATE_KEY_PATTERN.match(raw_key):
            print(f"WARN: Skipping entry {line_number} in {file_path}: not a 32-byte hex private key.")
            continue
        keys.append(raw_key if raw_key.startswith('0x') else f"0x{raw_key}")

    if not keys:
        raise ConfigError(f"No private keys found in {file_path}")
    return keys


def load_proxies(file_path: Optional[str] = core_config.DEFAULT_PROXY_FILE) -> List[str]:
    """Loads proxies, one per line. A missing or empty file means no proxies."""
    if file_path is None:
        return []
    try:
        return _read_lines(file_path, 'proxy')
    except FileNotFoundError:
        return []
    except pd.errors.EmptyDataError:
        return []


class Wallet:
    """
    A funded account on the ledger: its key, derived address, optional proxy
    and the ledger client its traffic goes through.
    """
    def __init__(self, private_key: str, client: ILedgerClient, proxy: Optional[str] = None):
        self.account = Account.from_key(private_key)
        self.client = client
        self.proxy = proxy

    @property
    def address(self) -> str:
        return self.account.address

    def get_balance(self) -> Decimal:
        try:
            return self.client.get_balance(self.address)
        except Exception as e:
            print(f"ERROR: Failed to get balance of {self.address}: {e}")
            raise

    def __repr__(self) -> str:
        return f"Wallet(address='{self.address}', proxy='{mask_proxy(self.proxy)}')"


ClientBuilder = Callable[[Optional[str]], ILedgerClient]


class WalletManager:
    """
    Builds a Wallet per private key, pairing key i with proxy i when present.
    Keys that fail to initialize are skipped.
    """
    def __init__(self,
                 private_keys: List[str],
                 proxies: Optional[List[str]] = None,
                 client_builder: Optional[ClientBuilder] = None,
                 rpc_url: str = core_config.DEFAULT_RPC_URL,
                 chain_id: int = core_config.DEFAULT_CHAIN_ID,
                 client_options: Optional[Dict[str, Any]] = None
                ):
        self.proxies: List[str] = list(proxies or [])
        options = dict(client_options or {})
        self.client_builder: ClientBuilder = client_builder or (
            lambda proxy: Web3LedgerClient(rpc_url=rpc_url, chain_id=chain_id, proxy=proxy, **options))
        self.wallets: List[Wallet] = []

        if self.proxies and len(self.proxies) < len(private_keys):
            print(f"WARN: Not enough proxies ({len(self.proxies)}) for all private keys ({len(private_keys)}). "
                  f"Some wallets will work without proxy.")

        self._build_wallets(private_keys)

    @classmethod
    def from_files(cls,
                   key_file: str = core_config.DEFAULT_KEY_FILE,
                   proxy_file: Optional[str] = core_config.DEFAULT_PROXY_FILE,
                   **kwargs) -> 'WalletManager':
        private_keys = load_private_keys(key_file)
        proxies = load_proxies(proxy_file)
        print(f"INFO: Loaded {len(private_keys)} private keys and {len(proxies)} proxies")
        return cls(private_keys, proxies, **kwargs)

    def _build_wallets(self, private_keys: List[str]):
        for index, private_key in enumerate(private_keys):
            proxy = self.proxies[index] if index < len(self.proxies) else None
            try:
                wallet = Wallet(private_key, self.client_builder(proxy), proxy)
            except Exception as e:
                print(f"ERROR: Failed to initialize wallet for private key {index + 1}: {e}")
                continue
            self.wallets.append(wallet)
            print(f"INFO: Wallet initialized: {wallet.address}")

        if not self.wallets:
            print("CRITICAL: No wallets could be initialized. Check your private keys.")
        else:
            print(f"INFO: Successfully initialized {len(self.wallets)} wallets")

    @property
    def wallet_count(self) -> int:
        return len(self.wallets)

    def get_wallet_by_index(self, index: int) -> Optional[Wallet]:
        if 0 <= index < len(self.wallets):
            return self.wallets[index]
        return None
