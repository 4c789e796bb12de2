"""
Persists the ordered outcome log of each interaction batch.
"""
from typing import List, Optional

from . import config as core_config
from .errors import PersistenceError
from .outcome import InteractionOutcome
from .storage import ensure_directory, record_filename, unique_path, write_json


class InteractionRecorder:
    """
    Writes one JSON file per batch into `directory`. Persistence is
    best-effort: failures are logged and persist() returns None.
    """
    def __init__(self, directory: str = core_config.DEFAULT_INTERACTIONS_DIR):
        self.directory = directory
        try:
            ensure_directory(directory)
        except PersistenceError as e:
            print(f"ERROR: {e}. Interaction results will not be saved.")

    def persist(self, outcomes: List[InteractionOutcome], wallet_address: str,
                contract_address: str) -> Optional[str]:
        """
        :return: The path written, or None if the write failed.
        """
        try:
            ensure_directory(self.directory)
            path = unique_path(self.directory, record_filename(wallet_address, contract_address))
            write_json(path, [outcome.to_dict() for outcome in outcomes])
        except PersistenceError as e:
            print(f"ERROR: Failed to save interaction results: {e}")
            return None
        print(f"INFO: Interaction results saved to {path}")
        return path
