"""
JSON file store shared by the interaction and deployment records.
Records are keyed by wallet prefix, contract prefix and a millisecond timestamp.
"""
import json
import os
import time
from typing import Any, Optional

from .errors import PersistenceError

ADDRESS_PREFIX_LENGTH = 8


def record_filename(wallet_address: str, contract_address: str, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return (f"{wallet_address[:ADDRESS_PREFIX_LENGTH]}_"
            f"{contract_address[:ADDRESS_PREFIX_LENGTH]}_{timestamp_ms}.json")


def unique_path(directory: str, filename: str) -> str:
    """Joins directory and filename, adding a -N suffix while the path is taken."""
    path = os.path.join(directory, filename)
    stem, extension = os.path.splitext(path)
    suffix = 1
    while os.path.exists(path):
        path = f"{stem}-{suffix}{extension}"
        suffix += 1
    return path


def ensure_directory(directory: str) -> None:
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        raise PersistenceError(f"Cannot create directory {directory}: {e}") from e


def write_json(path: str, payload: Any) -> None:
    """Writes `payload` as indented JSON. Never leaves a half-written file behind."""
    temp_path = f"{path}.tmp"
    created = False
    try:
        with open(temp_path, 'x', encoding='utf-8') as record_file:
            created = True
            json.dump(payload, record_file, indent=2)
        os.replace(temp_path, path)
    except (OSError, TypeError, ValueError) as e:
        # Only clean up a temp file this call created
        if created and os.path.exists(temp_path):
            os.remove(temp_path)
        raise PersistenceError(f"Failed to write {path}: {e}") from e


def read_json(path: str) -> Any:
    try:
        with open(path, 'r', encoding='utf-8') as record_file:
            return json.load(record_file)
    except (OSError, json.JSONDecodeError) as e:
        raise PersistenceError(f"Failed to read {path}: {e}") from e
