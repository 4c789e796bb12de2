import random
from typing import List, Optional, Sequence

from ..catalog import FunctionDescriptor


class SelectionStrategy:
    """
    Abstract base class for function selection strategies.
    """
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng: random.Random = rng if rng is not None else random.Random()

    def choose_pool(self,
                    all_write_functions: Sequence[FunctionDescriptor],
                    safe_functions: Sequence[FunctionDescriptor],
                    success_count: int,
                    target_count: int
                   ) -> List[FunctionDescriptor]:
        """
        Returns the candidate pool for the next call given current progress.

        :param all_write_functions: Every state-changing function of the contract.
        :param safe_functions: The subset not flagged as risky by name.
        :param success_count: Successful calls so far.
        :param target_count: Successful calls wanted.
        :return: A non-empty list of candidates.
        """
        raise NotImplementedError("Subclasses must implement the choose_pool method.")

    def select(self,
               all_write_functions: Sequence[FunctionDescriptor],
               safe_functions: Sequence[FunctionDescriptor],
               success_count: int,
               target_count: int
              ) -> FunctionDescriptor:
        """Picks uniformly at random from the pool returned by choose_pool."""
        pool = self.choose_pool(all_write_functions, safe_functions, success_count, target_count)
        return self.rng.choice(pool)
