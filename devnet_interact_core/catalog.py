"""
Turns a compiled contract's ABI into function descriptors, and classifies
functions by name for the selection policy.
"""
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence

from . import config as core_config
from .errors import CatalogFormatError

KIND_UINT256 = 'uint256'
KIND_ADDRESS = 'address'
KIND_STRING = 'string'
KIND_OTHER = 'other'

TAG_INITIALIZER = 'initializer'
TAG_RISKY = 'risky'


class Mutability(Enum):
    PAYABLE = 'payable'
    NONPAYABLE = 'nonpayable'
    VIEW = 'view'
    PURE = 'pure'


class Capability(Enum):
    WRITABLE = 'writable'
    READ_ONLY = 'read_only'


class ParameterDescriptor:
    """A single function input. `kind` is what argument synthesis keys on."""
    def __init__(self, abi_type: str, name: str = ''):
        self.abi_type: str = abi_type
        self.name: str = name

    @property
    def kind(self) -> str:
        if self.abi_type in (KIND_UINT256, KIND_ADDRESS, KIND_STRING):
            return self.abi_type
        return KIND_OTHER

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterDescriptor):
            return NotImplemented
        return self.abi_type == other.abi_type and self.name == other.name

    def __hash__(self) -> int:
        return hash((self.abi_type, self.name))

    def __repr__(self) -> str:
        return f"ParameterDescriptor(type='{self.abi_type}', name='{self.name}')"


class FunctionDescriptor:
    """
    A contract function as described by the ABI. Immutable once built.
    """
    __slots__ = ('_name', '_inputs', '_mutability')

    def __init__(self, name: str, inputs: Sequence[ParameterDescriptor], mutability: Mutability):
        self._name = name
        self._inputs = tuple(inputs)
        self._mutability = mutability

    @property
    def name(self) -> str:
        return self._name

    @property
    def inputs(self) -> Sequence[ParameterDescriptor]:
        return self._inputs

    @property
    def mutability(self) -> Mutability:
        return self._mutability

    @property
    def capability(self) -> Capability:
        if self._mutability in (Mutability.VIEW, Mutability.PURE):
            return Capability.READ_ONLY
        return Capability.WRITABLE

    @property
    def is_writable(self) -> bool:
        return self.capability is Capability.WRITABLE

    @property
    def input_kinds(self) -> List[str]:
        return [param.kind for param in self._inputs]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FunctionDescriptor):
            return NotImplemented
        return (self._name, self._inputs, self._mutability) == (other._name, other._inputs, other._mutability)

    def __hash__(self) -> int:
        return hash((self._name, self._inputs, self._mutability))

    def __repr__(self) -> str:
        args = ', '.join(param.abi_type for param in self._inputs)
        return f"FunctionDescriptor({self._name}({args}) {self._mutability.value})"


def _parse_mutability(entry: Dict[str, Any]) -> Mutability:
    mutability = entry.get('stateMutability')
    if mutability is None:
        # Pre-0.5 ABIs only carry `constant` / `payable`
        if entry.get('constant'):
            return Mutability.VIEW
        return Mutability.PAYABLE if entry.get('payable') else Mutability.NONPAYABLE
    try:
        return Mutability(mutability)
    except ValueError:
        raise CatalogFormatError(f"Unknown stateMutability '{mutability}' for function {entry.get('name')}")


def function_from_abi_entry(entry: Dict[str, Any]) -> FunctionDescriptor:
    """Builds a descriptor from one ABI entry of type 'function'."""
    name = entry.get('name')
    if not isinstance(name, str) or not name:
        raise CatalogFormatError(f"ABI function entry without a name: {entry}")

    raw_inputs = entry.get('inputs', [])
    if not isinstance(raw_inputs, list):
        raise CatalogFormatError(f"ABI inputs of {name} must be a list, got {type(raw_inputs).__name__}")

    inputs: List[ParameterDescriptor] = []
    for raw_input in raw_inputs:
        if not isinstance(raw_input, dict) or 'type' not in raw_input:
            raise CatalogFormatError(f"Malformed input in ABI function {name}: {raw_input}")
        inputs.append(ParameterDescriptor(raw_input['type'], raw_input.get('name', '')))

    return FunctionDescriptor(name, inputs, _parse_mutability(entry))


def build_catalog(abi: Iterable[Dict[str, Any]]) -> List[FunctionDescriptor]:
    """
    Returns every function of the ABI in declaration order. Events,
    constructors, fallback and receive entries are ignored.

    :raises CatalogFormatError: If the ABI or one of its function entries is malformed.
    """
    if abi is None or isinstance(abi, (str, bytes, dict)):
        raise CatalogFormatError(f"ABI must be a list of entries, got {type(abi).__name__}")

    catalog: List[FunctionDescriptor] = []
    for entry in abi:
        if not isinstance(entry, dict):
            raise CatalogFormatError(f"ABI entry must be a mapping, got {type(entry).__name__}")
        if entry.get('type', 'function') != 'function':
            continue
        catalog.append(function_from_abi_entry(entry))
    return catalog


def write_functions(catalog: Iterable[FunctionDescriptor]) -> List[FunctionDescriptor]:
    """State-changing functions only (payable and nonpayable)."""
    return [fn for fn in catalog if fn.is_writable]


def classify_function_name(name: str,
                           initializer_hints: Sequence[str] = core_config.INITIALIZER_NAME_HINTS,
                           risky_hints: Sequence[str] = core_config.RISKY_NAME_HINTS
                          ) -> FrozenSet[str]:
    """
    Maps a function name to its category tags. Matching is case-insensitive
    substring matching.

    - 'initializer' when the name contains any initializer hint (set, init, add, increment).
    - one tag per risky hint found (power, decrement, pop, divide), plus 'risky' if any.
    """
    lowered = name.lower()
    tags = set()
    if any(hint in lowered for hint in initializer_hints):
        tags.add(TAG_INITIALIZER)
    risk_hits = [hint for hint in risky_hints if hint in lowered]
    if risk_hits:
        tags.update(risk_hits)
        tags.add(TAG_RISKY)
    return frozenset(tags)


def safe_functions(functions: Iterable[FunctionDescriptor]) -> List[FunctionDescriptor]:
    """Writable functions whose names hit none of the risky hints."""
    return [fn for fn in functions
            if fn.is_writable and TAG_RISKY not in classify_function_name(fn.name)]


def initializer_functions(functions: Iterable[FunctionDescriptor]) -> List[FunctionDescriptor]:
    return [fn for fn in functions if TAG_INITIALIZER in classify_function_name(fn.name)]


def find_function(catalog: Iterable[FunctionDescriptor], name: str,
                  input_kinds: Optional[Sequence[str]] = None) -> Optional[FunctionDescriptor]:
    """First writable function called `name` (and matching `input_kinds`, if given)."""
    for fn in catalog:
        if fn.name != name or not fn.is_writable:
            continue
        if input_kinds is not None and fn.input_kinds != list(input_kinds):
            continue
        return fn
    return None
