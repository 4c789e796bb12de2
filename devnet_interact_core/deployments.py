"""
Deployment records: what was deployed, by whom, and where, so later runs can
interact with existing contracts instead of deploying new ones.
"""
import os
from typing import Any, Dict, List, Optional

from . import config as core_config
from .errors import PersistenceError
from .outcome import Receipt, utc_timestamp
from .storage import ensure_directory, read_json, record_filename, unique_path, write_json


class DeploymentRecord:
    """A deployed contract: address, ABI, deploying wallet and deployment receipt data."""
    def __init__(self,
                 address: str,
                 abi: List[Dict[str, Any]],
                 wallet: str,
                 deployed_at: Optional[str] = None,
                 transaction_hash: Optional[str] = None,
                 block_number: Optional[int] = None,
                 gas_used: Optional[str] = None,
                 function_count: Optional[int] = None
                ):
        self.address = address
        self.abi = abi
        self.wallet = wallet
        self.deployed_at = deployed_at or utc_timestamp()
        self.transaction_hash = transaction_hash
        self.block_number = block_number
        self.gas_used = gas_used
        self.function_count = function_count

    @classmethod
    def from_receipt(cls, receipt: Receipt, abi: List[Dict[str, Any]], wallet: str,
                     function_count: int) -> 'DeploymentRecord':
        return cls(
            address=receipt.contract_address,
            abi=abi,
            wallet=wallet,
            transaction_hash=receipt.transaction_hash,
            block_number=receipt.block_number,
            gas_used=str(receipt.gas_used) if receipt.gas_used is not None else None,
            function_count=function_count
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeploymentRecord':
        if not isinstance(data, dict):
            raise PersistenceError(f"Deployment record must be an object, got {type(data).__name__}")
        for required in ('address', 'abi', 'wallet'):
            if required not in data:
                raise PersistenceError(f"Deployment record is missing '{required}'")
        return cls(
            address=data['address'],
            abi=data['abi'],
            wallet=data['wallet'],
            deployed_at=data.get('deployedAt'),
            transaction_hash=data.get('transactionHash'),
            block_number=data.get('blockNumber'),
            gas_used=data.get('gasUsed'),
            function_count=data.get('functionCount')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'address': self.address,
            'abi': self.abi,
            'wallet': self.wallet,
            'deployedAt': self.deployed_at,
            'transactionHash': self.transaction_hash,
            'blockNumber': self.block_number,
            'gasUsed': self.gas_used,
            'functionCount': self.function_count,
        }

    def __repr__(self) -> str:
        return f"DeploymentRecord(address='{self.address}', wallet='{self.wallet}', block={self.block_number})"


class DeploymentStore:
    """
    Keeps deployment records in memory and mirrors them to JSON files.
    """
    def __init__(self, directory: str = core_config.DEFAULT_DEPLOYMENTS_DIR):
        self.directory = directory
        self.records: List[DeploymentRecord] = []
        try:
            ensure_directory(directory)
        except PersistenceError as e:
            print(f"ERROR: {e}. Deployments will not be saved.")

    def save(self, record: DeploymentRecord) -> Optional[str]:
        """Adds the record and writes it to disk. Write failures are logged, not raised."""
        self.records.append(record)
        try:
            ensure_directory(self.directory)
            path = unique_path(self.directory, record_filename(record.wallet, record.address))
            write_json(path, record.to_dict())
        except PersistenceError as e:
            print(f"ERROR: Failed to save deployment info: {e}")
            return None
        print(f"INFO: Deployment info saved to {path}")
        return path

    def load_previous(self) -> List[DeploymentRecord]:
        """Loads every *.json record in the directory, in file name order."""
        if not os.path.isdir(self.directory):
            print(f"WARN: Deployments directory {self.directory} does not exist.")
            return []

        loaded: List[DeploymentRecord] = []
        for filename in sorted(os.listdir(self.directory)):
            if not filename.endswith('.json'):
                continue
            path = os.path.join(self.directory, filename)
            try:
                loaded.append(DeploymentRecord.from_dict(read_json(path)))
            except PersistenceError as e:
                print(f"WARN: Skipping deployment file {filename}: {e}")

        self.records.extend(loaded)
        print(f"INFO: Loaded {len(loaded)} previous deployments")
        return loaded

    def by_wallet(self, wallet_address: str) -> List[DeploymentRecord]:
        wanted = wallet_address.lower()
        return [record for record in self.records if record.wallet.lower() == wanted]

    @property
    def count(self) -> int:
        return len(self.records)
