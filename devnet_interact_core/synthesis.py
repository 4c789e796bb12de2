"""
Argument synthesis: produces a plausible, safe value for each function input
from the declared type and the function's name.
"""
import random
import re
from typing import Any, List, Optional

from .catalog import FunctionDescriptor, ParameterDescriptor, KIND_ADDRESS, KIND_STRING, KIND_UINT256

# (name hints, inclusive low, inclusive high), first match wins
UINT_RANGES = (
    (('power',), 2, 6),                   # repeated exponentiation overflows quickly
    (('decrement', 'subtract'), 1, 50),   # current value is unknown, stay small
    (('divide',), 2, 9),                  # never zero, keep the quotient meaningful
    (('increment', 'add'), 10, 109),
)
DEFAULT_UINT_RANGE = (1, 200)
KEY_SUFFIX_RANGE = (0, 99)

_FIXED_BYTES = re.compile(r'^bytes([0-9]+)$')


def uint_range_for(function_name: str):
    """The inclusive (low, high) range used for uint256 inputs of `function_name`."""
    lowered = function_name.lower()
    for hints, low, high in UINT_RANGES:
        if any(hint in lowered for hint in hints):
            return low, high
    return DEFAULT_UINT_RANGE


def key_prefix_for(function_name: str) -> str:
    lowered = function_name.lower()
    if 'set' in lowered:
        return 'set_key_'
    if 'store' in lowered:
        return 'store_key_'
    return 'key'


def neutral_default(abi_type: str) -> Any:
    """A value the ABI encoder accepts for `abi_type` that carries no meaning."""
    if abi_type.endswith(']'):
        return []
    if abi_type == 'bool':
        return False
    if abi_type == 'bytes':
        return b''
    fixed = _FIXED_BYTES.match(abi_type)
    if fixed:
        return bytes(int(fixed.group(1)))
    if abi_type == 'string':
        return ''
    return 0


def synthesize(parameter: ParameterDescriptor, function_name: str, caller_address: str,
               rng: Optional[random.Random] = None) -> Any:
    """
    Produces one argument value. Pure apart from the draws taken from `rng`.

    - uint256: uniform integer from the name-dependent range (see UINT_RANGES).
    - address: the caller's own address.
    - string: a bounded key name, `set_key_N`, `store_key_N` or `keyN` with N in [0, 99].
    - anything else: a neutral default for the type.
    """
    rng = rng or random
    kind = parameter.kind
    if kind == KIND_UINT256:
        low, high = uint_range_for(function_name)
        return rng.randint(low, high)
    if kind == KIND_ADDRESS:
        return caller_address
    if kind == KIND_STRING:
        return f"{key_prefix_for(function_name)}{rng.randint(*KEY_SUFFIX_RANGE)}"
    return neutral_default(parameter.abi_type)


class ArgumentSynthesizer:
    """
    Holds the random source used for synthesis so runs can be seeded.
    Carries no other state between calls.
    """
    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng: random.Random = rng if rng is not None else random.Random(seed)

    def synthesize(self, parameter: ParameterDescriptor, function_name: str, caller_address: str) -> Any:
        return synthesize(parameter, function_name, caller_address, self.rng)

    def arguments_for(self, function: FunctionDescriptor, caller_address: str) -> List[Any]:
        """Synthesizes every input of `function`, in declaration order."""
        return [self.synthesize(param, function.name, caller_address) for param in function.inputs]
