"""
Symbol and Constant Table
=========================

Maps variable and constant names to fixed memory addresses.

Memory Bands
------------
| Band      | Default range | Contents                                  |
|-----------|---------------|-------------------------------------------|
| variables | 0x80-0xC7     | synthetic constants, literals, variables |
| temps     | 0xC8-0xFF     | anonymous intermediate results            |

Both bands are bump allocated: each new entry takes the next address and
nothing is ever freed. Running off the end of a band raises CapacityError.

Pre-seeded Constants
--------------------
| Name      | Value | Address | Used by                         |
|-----------|-------|---------|---------------------------------|
| _zero     | 0     | 0x80    | multiplication accumulator init |
| _one      | 1     | 0x81    | two's complement negation       |
| _neg_one  | 255   | 0x82    | loop counters (-1 mod 256)      |

Numeric literals are interned as `_const_<value>`, so repeated literals share
one cell.

Constants live in their own namespace. A source variable spelled `_one` or
`_const_7` gets a cell of its own and never aliases a constant.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from neander_sdk.compiler.errors import CapacityError
from neander_sdk.errors import SourceLocation


ZERO = "_zero"
ONE = "_one"
NEG_ONE = "_neg_one"

DEFAULT_VARIABLE_BASE = 0x80
DEFAULT_TEMP_BASE = 0xC8
DEFAULT_MEMORY_SIZE = 0x100


@dataclass
class Variable:
    """
    A named memory cell.

    Attributes:
        name: Variable name, or the display name of a constant
        address: Fixed memory address
        value: Initial value written to the data section
        initialized: True once an explicit initial value has been set
        constant: True for compiler-owned constant cells
    """
    name: str
    address: int
    value: int = 0
    initialized: bool = False
    constant: bool = False

    @property
    def is_constant(self) -> bool:
        return self.constant


class SymbolTable:
    """
    Variables, constants and temp slots for one compilation.

    Usage:
        symbols = SymbolTable()
        x = symbols.declare("x")
        two = symbols.constant(2)
        tmp = symbols.allocate_temp()
    """

    def __init__(
        self,
        variable_base: int = DEFAULT_VARIABLE_BASE,
        variable_limit: int = DEFAULT_TEMP_BASE,
        temp_base: int = DEFAULT_TEMP_BASE,
        temp_limit: int = DEFAULT_MEMORY_SIZE,
    ):
        if not variable_base < variable_limit <= temp_base < temp_limit:
            raise ValueError(
                f"invalid memory bands: variables 0x{variable_base:02X}-0x{variable_limit:02X}, "
                f"temps 0x{temp_base:02X}-0x{temp_limit:02X}"
            )

        self.variable_base = variable_base
        self.variable_limit = variable_limit
        self.temp_base = temp_base
        self.temp_limit = temp_limit

        self._variables: dict[str, Variable] = {}
        self._constants: dict[str, Variable] = {}
        self._cells: list[Variable] = []
        self._next_variable = variable_base
        self._next_temp = temp_base

        self._zero = self._intern(ZERO, 0)
        self._one = self._intern(ONE, 1)
        self._neg_one = self._intern(NEG_ONE, 0xFF)

    # =========================================================================
    # Variables and Constants
    # =========================================================================

    def declare(
        self,
        name: str,
        value: int = 0,
        initialized: bool = False,
        location: Optional[SourceLocation] = None,
    ) -> Variable:
        """
        Return the variable called name, creating it if needed.

        An existing uninitialized variable takes on value when initialized
        is True; an initialized one is left alone.

        Raises:
            CapacityError: The variable band is full
        """
        existing = self._variables.get(name)
        if existing is not None:
            if initialized and not existing.initialized:
                existing.value = value & 0xFF
                existing.initialized = True
            return existing

        variable = self._allocate(name, value, initialized, constant=False, location=location)
        self._variables[name] = variable
        return variable

    def constant(self, value: int, location: Optional[SourceLocation] = None) -> Variable:
        """Intern a literal byte value as `_const_<value>`."""
        return self._intern(f"_const_{value & 0xFF}", value, location)

    def _intern(self, name: str, value: int, location: Optional[SourceLocation] = None) -> Variable:
        existing = self._constants.get(name)
        if existing is not None:
            return existing
        constant = self._allocate(name, value, True, constant=True, location=location)
        self._constants[name] = constant
        return constant

    def _allocate(
        self,
        name: str,
        value: int,
        initialized: bool,
        constant: bool,
        location: Optional[SourceLocation],
    ) -> Variable:
        if self._next_variable >= self.variable_limit:
            raise CapacityError("variable", self.variable_limit, location)
        cell = Variable(name, self._next_variable, value & 0xFF, initialized, constant)
        self._cells.append(cell)
        self._next_variable += 1
        return cell

    def lookup(self, name: str) -> Optional[Variable]:
        """Return the source variable called name, if declared."""
        return self._variables.get(name)

    def lookup_constant(self, name: str) -> Optional[Variable]:
        """Return the constant with display name `name` (e.g. `_const_7`)."""
        return self._constants.get(name)

    def address_of(self, name: str) -> int:
        """Return the address of a source variable (KeyError otherwise)."""
        return self._variables[name].address

    @property
    def zero(self) -> int:
        return self._zero.address

    @property
    def one(self) -> int:
        return self._one.address

    @property
    def neg_one(self) -> int:
        return self._neg_one.address

    # =========================================================================
    # Temp Slots
    # =========================================================================

    def allocate_temp(self, location: Optional[SourceLocation] = None) -> int:
        """
        Return a fresh temp slot address. Slots are never reused.

        Raises:
            CapacityError: The temp band is full
        """
        if self._next_temp >= self.temp_limit:
            raise CapacityError("temp", self.temp_limit, location)
        address = self._next_temp
        self._next_temp += 1
        return address

    @property
    def temps_used(self) -> int:
        return self._next_temp - self.temp_base

    # =========================================================================
    # Container Protocol
    # =========================================================================

    def __iter__(self) -> Iterator[Variable]:
        """Iterate variables and constants in declaration (address) order."""
        return iter(list(self._cells))

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, name: object) -> bool:
        """True if a source variable called name has been declared."""
        return name in self._variables

    def user_variables(self) -> list[Variable]:
        """Variables named in the source, without synthetic constants."""
        return [v for v in self._cells if not v.is_constant]
