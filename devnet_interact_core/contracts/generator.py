"""
Generates the Solidity source of a contract with many randomly named
functions to interact with.
"""
import random
from typing import Dict, List, Optional, Tuple

from .. import config as core_config

CONTRACT_HEADER = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.0;

contract {name} {{
    uint256 private value;
    mapping(string => uint256) private namedValues;
    mapping(address => uint256) private userValues;
    string[] private keys;
    address public owner;

    event ValueChanged(uint256 oldValue, uint256 newValue, address indexed changer);
    event NamedValueChanged(string key, uint256 oldValue, uint256 newValue);
    event UserValueChanged(address user, uint256 oldValue, uint256 newValue);

    constructor(uint256 initialValue) {{
        value = initialValue;
        owner = msg.sender;
    }}

    function getValue() public view returns (uint256) {{
        return value;
    }}

    function setValue(uint256 newValue) public {{
        uint256 oldValue = value;
        value = newValue;
        emit ValueChanged(oldValue, newValue, msg.sender);
    }}

    function setPublicNumber(string memory key, uint256 newValue) public {{
        uint256 oldValue = namedValues[key];
        namedValues[key] = newValue;
        if (oldValue == 0 && newValue != 0) {{
            keys.push(key);
        }}
        emit NamedValueChanged(key, oldValue, newValue);
    }}
"""

# Function bodies keyed by function type; {name} is substituted
FUNCTION_TEMPLATES: Dict[str, str] = {
    'increment': """
    function {name}(uint256 amount) public {{
        uint256 oldValue = value;
        value += amount;
        emit ValueChanged(oldValue, value, msg.sender);
    }}
""",
    'decrement': """
    function {name}(uint256 amount) public {{
        uint256 oldValue = value;
        require(value >= amount, "Value would be negative");
        value -= amount;
        emit ValueChanged(oldValue, value, msg.sender);
    }}
""",
    'multiply': """
    function {name}(uint256 factor) public {{
        uint256 oldValue = value;
        value *= factor;
        emit ValueChanged(oldValue, value, msg.sender);
    }}
""",
    'divide': """
    function {name}(uint256 divisor) public {{
        require(divisor > 0, "Cannot divide by zero");
        uint256 oldValue = value;
        value /= divisor;
        emit ValueChanged(oldValue, value, msg.sender);
    }}
""",
    'power': """
    function {name}(uint256 exponent) public {{
        uint256 oldValue = value;
        uint256 result = 1;
        for (uint256 i = 0; i < exponent; i++) {{
            result *= oldValue;
        }}
        value = result;
        emit ValueChanged(oldValue, value, msg.sender);
    }}
""",
    'add': """
    function {name}(uint256 amount) public {{
        uint256 oldValue = value;
        value = value + amount;
        emit ValueChanged(oldValue, value, msg.sender);
    }}
""",
    'subtract': """
    function {name}(uint256 amount) public {{
        uint256 oldValue = value;
        require(value >= amount, "Value would be negative");
        value = value - amount;
        emit ValueChanged(oldValue, value, msg.sender);
    }}
""",
    'set': """
    function {name}(string memory key, uint256 newValue) public {{
        uint256 oldValue = namedValues[key];
        namedValues[key] = newValue;
        if (oldValue == 0 && newValue != 0) {{
            keys.push(key);
        }}
        emit NamedValueChanged(key, oldValue, newValue);
    }}
""",
    'get': """
    function {name}(string memory key) public view returns (uint256) {{
        return namedValues[key];
    }}
""",
    'toggle': """
    function {name}() public {{
        uint256 oldValue = value;
        value = value > 0 ? 0 : 1;
        emit ValueChanged(oldValue, value, msg.sender);
    }}
""",
    'update': """
    function {name}(address user, uint256 newValue) public {{
        uint256 oldValue = userValues[user];
        userValues[user] = newValue;
        emit UserValueChanged(user, oldValue, newValue);
    }}
""",
    'push': """
    function {name}(string memory key) public {{
        keys.push(key);
    }}
""",
    'pop': """
    function {name}() public {{
        require(keys.length > 0, "No keys to remove");
        keys.pop();
    }}
""",
    'swap': """
    function {name}(string memory key1, string memory key2) public {{
        uint256 temp = namedValues[key1];
        namedValues[key1] = namedValues[key2];
        namedValues[key2] = temp;
    }}
""",
    'reset': """
    function {name}() public {{
        uint256 oldValue = value;
        value = 0;
        emit ValueChanged(oldValue, 0, msg.sender);
    }}
""",
    'max': """
    function {name}(uint256 a, uint256 b) public pure returns (uint256) {{
        return a > b ? a : b;
    }}
""",
}

# Rarer functions, capped per contract
COMPLEX_FUNCTION_TEMPLATES: Dict[str, str] = {
    'store': """
    function {name}(address user, string memory key, uint256 amount) public {{
        namedValues[string(abi.encodePacked(key, user))] = amount;
    }}
""",
}
MAX_COMPLEX_FUNCTIONS = 3
COMPLEX_FUNCTION_CHANCE = 0.1

NOUNS = ('Value', 'Counter', 'Number', 'Amount', 'Total', 'Balance', 'Score', 'Point',
         'Quantity', 'Sum', 'Data', 'Token', 'Asset', 'Share', 'Unit', 'Record', 'State', 'Limit')
MODIFIERS = ('Max', 'Min', 'Current', 'Previous', 'Next', 'First', 'Last', 'Primary',
             'Global', 'Local', 'User', 'Admin', 'Public', 'System', 'Custom', 'Shared', 'Daily')


class ContractGenerator:
    """
    Builds a `MultiFunction`-style contract: a fixed header (constructor,
    setValue, setPublicNumber) followed by `function_count` functions drawn
    from FUNCTION_TEMPLATES with random modifier/noun names. Up to
    MAX_COMPLEX_FUNCTIONS of them come from COMPLEX_FUNCTION_TEMPLATES instead.
    """
    def __init__(self, contract_name: str = core_config.DEFAULT_CONTRACT_NAME,
                 rng: Optional[random.Random] = None,
                 complex_chance: float = COMPLEX_FUNCTION_CHANCE):
        self.contract_name = contract_name
        self.rng = rng if rng is not None else random.Random()
        self.complex_chance = complex_chance

    def _function_names(self, function_count: int) -> List[Tuple[str, str]]:
        reserved = {'getValue', 'setValue', 'setPublicNumber'}
        names: List[Tuple[str, str]] = []
        complex_count = 0
        for index in range(function_count):
            if complex_count < MAX_COMPLEX_FUNCTIONS and self.rng.random() < self.complex_chance:
                function_type = self.rng.choice(sorted(COMPLEX_FUNCTION_TEMPLATES))
                complex_count += 1
            else:
                function_type = self.rng.choice(sorted(FUNCTION_TEMPLATES))
            name = f"{function_type}{self.rng.choice(MODIFIERS)}{self.rng.choice(NOUNS)}"
            if name in reserved:
                name = f"{name}{index}"
            reserved.add(name)
            names.append((function_type, name))
        return names

    def generate_source(self, function_count: int = core_config.DEFAULT_FUNCTION_COUNT) -> str:
        print(f"INFO: Generating contract with {function_count} functions")
        parts = [CONTRACT_HEADER.format(name=self.contract_name)]
        for function_type, name in self._function_names(function_count):
            template = FUNCTION_TEMPLATES.get(function_type) or COMPLEX_FUNCTION_TEMPLATES[function_type]
            parts.append(template.format(name=name))
        parts.append("}\n")
        return ''.join(parts)
