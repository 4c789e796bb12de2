# devnet_interact_core/errors.py
"""
Error types raised (or, for InitializationWarning, recorded) by the library.
"""
from typing import Optional


class InteractError(Exception):
    """Base class for every error raised by devnet_interact_core."""


class ConfigError(InteractError):
    """Missing or invalid run configuration, key file, or proxy file."""


class SubmissionError(InteractError):
    """
    A contract call could not be confirmed: invalid arguments, reverted
    execution, RPC/network failure, or receipt timeout.
    """
    def __init__(self, message: str, function_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.function_name = function_name


class TransactionReverted(InteractError):
    """The transaction was mined with status 0."""
    def __init__(self, tx_hash: str, block_number: Optional[int] = None):
        super().__init__(f"Transaction {tx_hash} reverted (block {block_number})")
        self.tx_hash = tx_hash
        self.block_number = block_number


class CatalogEmptyError(InteractError):
    """The contract exposes no state-changing functions."""


class CatalogFormatError(InteractError, ValueError):
    """An ABI entry could not be turned into a function descriptor."""


class PersistenceError(InteractError):
    """A record could not be written to or read from the file store."""


class DeploymentError(InteractError):
    """Contract generation, compilation, or deployment failed."""


class FaucetError(InteractError):
    """The faucet request failed or returned an unexpected body."""


class CaptchaError(FaucetError):
    """The captcha could not be solved."""


class InitializationWarning(UserWarning):
    """
    Recorded (never raised) when a best-effort contract priming call fails.
    The interaction loop proceeds regardless.
    """
    def __init__(self, function_name: str, message: str):
        super().__init__(f"{function_name}: {message}")
        self.function_name = function_name
        self.message = message
