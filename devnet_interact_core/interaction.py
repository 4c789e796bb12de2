# devnet_interact_core/interaction.py
"""
The interaction driver: primes a deployed contract, then issues randomly
selected write calls until a target number succeed or the attempt budget
runs out. Outcomes are logged in order and handed to the recorder.
"""

import math
import time
from enum import Enum
from typing import Any, List, Optional, Sequence

from . import config as core_config
from .catalog import (FunctionDescriptor, KIND_STRING, KIND_UINT256, build_catalog, find_function,
                      safe_functions, write_functions)
from .errors import CatalogEmptyError, InitializationWarning, SubmissionError
from .outcome import InteractionBatchResult, InteractionOutcome, ProgressState
from .recorder import InteractionRecorder
from .strategies.base_strategy import SelectionStrategy
from .strategies.phased_selection import PhasedSelectionStrategy
from .submitter import ContractHandle, TransactionSubmitter
from .synthesis import ArgumentSynthesizer


class DriverState(Enum):
    IDLE = 'idle'
    INITIALIZING = 'initializing'
    RUNNING = 'running'
    DONE = 'done'


def retry_budget(target_count: int, retry_ratio: float = core_config.DEFAULT_RETRY_RATIO) -> int:
    """Extra attempts allowed once the primary attempts are used up: floor(target * ratio)."""
    if retry_ratio < 0:
        raise ValueError(f"retry_ratio must be non-negative, got {retry_ratio}")
    return int(math.floor(target_count * retry_ratio))


def _format_args(args: Sequence[Any]) -> str:
    return ', '.join(str(arg) for arg in args)


class InteractionDriver:
    """
    Runs one interaction batch per call to run(). Strictly sequential: one
    attempt is submitted and confirmed (or fails) before the next is chosen,
    so a wallet's nonce is never raced.

    Attempts and successes are counted separately. The first `target_count`
    attempts are primary: each is logged with its own interaction id whether
    it succeeds or fails. After that, only successes are logged and each
    failure spends one of `floor(target_count * retry_ratio)` extra retries.
    """
    def __init__(self,
                 selection_strategy: Optional[SelectionStrategy] = None,
                 synthesizer: Optional[ArgumentSynthesizer] = None,
                 submitter: Optional[TransactionSubmitter] = None,
                 recorder: Optional[InteractionRecorder] = None,
                 inter_delay: float = core_config.DEFAULT_INTERACTION_DELAY_MS / 1000.0,
                 retry_ratio: float = core_config.DEFAULT_RETRY_RATIO,
                 initialize_contract: bool = True,
                 init_baseline_function: str = core_config.INIT_BASELINE_FUNCTION,
                 init_baseline_value: int = core_config.INIT_BASELINE_VALUE,
                 init_key_function: str = core_config.INIT_KEY_FUNCTION,
                 init_key_names: Sequence[str] = core_config.INIT_KEY_NAMES,
                 init_key_value: int = core_config.INIT_KEY_VALUE
                ):
        self.selection_strategy = selection_strategy or PhasedSelectionStrategy()
        self.synthesizer = synthesizer or ArgumentSynthesizer()
        self.submitter = submitter or TransactionSubmitter()
        self.recorder = recorder
        self.inter_delay = inter_delay
        self.retry_ratio = retry_ratio
        self.initialize_contract = initialize_contract
        self.init_baseline_function = init_baseline_function
        self.init_baseline_value = init_baseline_value
        self.init_key_function = init_key_function
        self.init_key_names = tuple(init_key_names)
        self.init_key_value = init_key_value

        self.state = DriverState.IDLE
        self.last_progress: Optional[ProgressState] = None
        self.last_init_warnings: List[InitializationWarning] = []

    def interact(self, wallet: Any, contract_info: Any, target_count: int) -> InteractionBatchResult:
        """
        Entry point for orchestration code: builds the catalog and contract
        handle from a deployment record, runs the batch and persists it.

        :param contract_info: Anything with `address` and `abi` attributes (e.g. a DeploymentRecord).
        :raises CatalogFormatError: If the ABI is malformed.
        """
        print(f"INFO: Starting {target_count} interactions with contract {contract_info.address} "
              f"from wallet {wallet.address}")
        catalog = build_catalog(contract_info.abi)
        handle = ContractHandle.from_deployment(wallet, contract_info.address, contract_info.abi, catalog)

        batch_result = self.run(wallet, handle, catalog, target_count)

        if self.recorder is not None and batch_result.results:
            self.recorder.persist(batch_result.results, wallet.address, contract_info.address)

        print(f"INFO: Completed {batch_result.successful}/{batch_result.total} interactions successfully")
        return batch_result

    def run(self,
            wallet: Any,
            handle: ContractHandle,
            catalog: Sequence[FunctionDescriptor],
            target_count: int,
            inter_delay: Optional[float] = None
           ) -> InteractionBatchResult:
        """
        Executes the INITIALIZING -> RUNNING -> DONE sequence for one contract.
        Never raises for submission failures; a contract with no writable
        functions yields an empty result.
        """
        if target_count < 0:
            raise ValueError(f"target_count must be non-negative, got {target_count}")
        delay = self.inter_delay if inter_delay is None else inter_delay

        self.state = DriverState.INITIALIZING
        self.last_init_warnings = []
        if self.initialize_contract:
            self.last_init_warnings = self._initialize_contract_state(handle, catalog)

        self.state = DriverState.RUNNING
        try:
            all_writes = write_functions(catalog)
            if not all_writes:
                raise CatalogEmptyError(f"No writable functions found in the ABI of {handle.address}")
        except CatalogEmptyError as e:
            print(f"WARN: {e}")
            self.state = DriverState.DONE
            self.last_progress = ProgressState(target_count, 0)
            return InteractionBatchResult.empty(target_count)

        safe = safe_functions(all_writes)
        progress = ProgressState(target_count, retry_budget(target_count, self.retry_ratio))
        self.last_progress = progress
        results: List[InteractionOutcome] = []

        while progress.should_continue():
            self._attempt_once(wallet, handle, all_writes, safe, progress, results)
            time.sleep(delay)

        self.state = DriverState.DONE
        return InteractionBatchResult(total=target_count, successful=progress.success_count, results=results)

    def _attempt_once(self,
                      wallet: Any,
                      handle: ContractHandle,
                      all_writes: Sequence[FunctionDescriptor],
                      safe: Sequence[FunctionDescriptor],
                      progress: ProgressState,
                      results: List[InteractionOutcome]):
        """One select -> synthesize -> submit -> record step. Mutates `progress` and `results`."""
        function = self.selection_strategy.select(all_writes, safe, progress.success_count, progress.target_count)
        args = self.synthesizer.arguments_for(function, wallet.address)
        primary = progress.in_primary_budget
        interaction_id = progress.attempt_index + 1

        if primary:
            print(f"INFO: [{interaction_id}/{progress.target_count}] Calling {function.name}({_format_args(args)})")
        else:
            print(f"INFO: [retry, {progress.retries_left} left] Calling {function.name}({_format_args(args)})")

        progress.total_attempts += 1
        try:
            receipt = self.submitter.submit(handle, function.name, args)
        except SubmissionError as e:
            if primary:
                print(f"ERROR: Interaction {interaction_id} failed: {e.message}")
                results.append(InteractionOutcome.failed(interaction_id, function.name, args, e.message))
                progress.attempt_index += 1
            else:
                progress.retries_left -= 1
                print(f"WARN: Retry attempt failed ({e.message}). {progress.retries_left} retries remaining.")
        else:
            results.append(InteractionOutcome.succeeded(interaction_id, function.name, args, receipt))
            progress.success_count += 1
            progress.attempt_index += 1
            print(f"INFO: Interaction successful - TX: {receipt.transaction_hash}, Gas used: {receipt.gas_used}")

    def _find_key_setter(self, catalog: Sequence[FunctionDescriptor]) -> Optional[FunctionDescriptor]:
        """The configured key setter, else any writable `set*(string, uint256)` function."""
        key_setter = find_function(catalog, self.init_key_function, [KIND_STRING, KIND_UINT256])
        if key_setter is not None:
            return key_setter
        for fn in write_functions(catalog):
            if 'set' in fn.name.lower() and fn.input_kinds == [KIND_STRING, KIND_UINT256]:
                return fn
        return None

    def _initialize_contract_state(self, handle: ContractHandle,
                                   catalog: Sequence[FunctionDescriptor]) -> List[InitializationWarning]:
        """
        Best-effort priming: set a baseline value, then store a few well-known
        keys so functions that need non-empty state have something to work on.
        Failures are collected and logged, never raised.
        """
        print("INFO: Initializing contract state...")
        warnings: List[InitializationWarning] = []

        baseline = find_function(catalog, self.init_baseline_function, [KIND_UINT256])
        if baseline is None:
            warnings.append(InitializationWarning(self.init_baseline_function, "not present in the contract"))
        else:
            result = self.submitter.try_submit(handle, baseline.name, [self.init_baseline_value])
            if not result.ok:
                warnings.append(InitializationWarning(baseline.name, result.error.message))

        key_setter = self._find_key_setter(catalog)
        if key_setter is None:
            warnings.append(InitializationWarning(self.init_key_function, "no (string, uint256) setter in the contract"))
        else:
            for key_name in self.init_key_names:
                result = self.submitter.try_submit(handle, key_setter.name, [key_name, self.init_key_value])
                if not result.ok:
                    # Remaining keys would hit the same failure
                    warnings.append(InitializationWarning(key_setter.name, result.error.message))
                    break

        if warnings:
            for warning in warnings:
                print(f"WARN: Failed to initialize contract state: {warning}")
        else:
            print("INFO: Contract state initialized successfully")
        return warnings


def interact(wallet: Any, contract_info: Any, target_count: int,
             driver: Optional[InteractionDriver] = None) -> InteractionBatchResult:
    """Module-level convenience wrapper around InteractionDriver.interact."""
    driver = driver or InteractionDriver(recorder=InteractionRecorder())
    return driver.interact(wallet, contract_info, target_count)
