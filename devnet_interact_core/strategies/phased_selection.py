"""
Success-ratio phased selection: additive calls first, then the safe set,
then everything including the risky functions.
"""
import random
from typing import List, Optional, Sequence

from .. import config as core_config
from ..catalog import FunctionDescriptor, initializer_functions
from ..errors import CatalogEmptyError
from .base_strategy import SelectionStrategy

PHASE_WARMUP = 'warmup'
PHASE_STEADY = 'steady'
PHASE_CLOSING = 'closing'


def selection_phase(success_count: int, target_count: int,
                    warmup_end: float = core_config.WARMUP_PHASE_END,
                    steady_end: float = core_config.STEADY_PHASE_END) -> str:
    """Phase for the ratio r = success_count / target_count."""
    if target_count <= 0:
        return PHASE_CLOSING
    ratio = success_count / target_count
    if ratio < warmup_end:
        return PHASE_WARMUP
    if ratio < steady_end:
        return PHASE_STEADY
    return PHASE_CLOSING


class PhasedSelectionStrategy(SelectionStrategy):
    """
    - warm-up (r < 0.3): functions tagged initializer (set/init/add/increment),
      else the safe set.
    - steady (0.3 <= r < 0.7): the safe set, else all write functions.
    - closing (r >= 0.7): all write functions, risky ones included.

    Any pool that would come out empty falls back to all write functions.
    """
    def __init__(self,
                 rng: Optional[random.Random] = None,
                 warmup_end: float = core_config.WARMUP_PHASE_END,
                 steady_end: float = core_config.STEADY_PHASE_END):
        super().__init__(rng)
        if not 0.0 <= warmup_end <= steady_end <= 1.0:
            raise ValueError(f"Phase boundaries must satisfy 0 <= warmup_end <= steady_end <= 1, got {warmup_end}, {steady_end}")
        self.warmup_end = warmup_end
        self.steady_end = steady_end

    def choose_pool(self,
                    all_write_functions: Sequence[FunctionDescriptor],
                    safe_functions: Sequence[FunctionDescriptor],
                    success_count: int,
                    target_count: int
                   ) -> List[FunctionDescriptor]:
        if not all_write_functions:
            raise CatalogEmptyError("No writable functions to select from.")

        phase = selection_phase(success_count, target_count, self.warmup_end, self.steady_end)
        pool: List[FunctionDescriptor]
        if phase == PHASE_WARMUP:
            pool = initializer_functions(all_write_functions) or list(safe_functions)
        elif phase == PHASE_STEADY:
            pool = list(safe_functions)
        else:
            pool = list(all_write_functions)

        return pool or list(all_write_functions)
