"""
Symbol Table Tests
==================

Tests for variable, constant and temp slot allocation.
"""

import pytest

from neander_sdk.compiler.errors import CapacityError
from neander_sdk.compiler.symbols import NEG_ONE, ONE, ZERO, SymbolTable


class TestPreseededConstants:
    """Tests for the constants every program starts with."""

    def test_constant_addresses(self):
        """_zero, _one and _neg_one occupy the first three cells."""
        symbols = SymbolTable()
        assert symbols.zero == 0x80
        assert symbols.one == 0x81
        assert symbols.neg_one == 0x82

    def test_constant_values(self):
        """The constants hold 0, 1 and 255."""
        symbols = SymbolTable()
        assert symbols.lookup_constant(ZERO).value == 0
        assert symbols.lookup_constant(ONE).value == 1
        assert symbols.lookup_constant(NEG_ONE).value == 0xFF
        assert all(v.is_constant for v in symbols)

    def test_custom_base(self):
        """The constants follow the variable base."""
        symbols = SymbolTable(variable_base=0x40, variable_limit=0x60,
                              temp_base=0x60, temp_limit=0x80)
        assert symbols.zero == 0x40
        assert symbols.allocate_temp() == 0x60

    @pytest.mark.parametrize("bands", [
        (0x80, 0x80, 0xC8, 0x100),
        (0x80, 0xD0, 0xC8, 0x100),
        (0x80, 0xC8, 0xC8, 0xC8),
    ])
    def test_invalid_bands(self, bands):
        """Empty or overlapping bands are rejected."""
        with pytest.raises(ValueError):
            SymbolTable(*bands)


class TestVariables:
    """Tests for declare() and constant()."""

    def test_sequential_addresses(self):
        """Variables take consecutive cells in declaration order."""
        symbols = SymbolTable()
        assert symbols.declare("x").address == 0x83
        assert symbols.declare("y").address == 0x84
        assert [v.name for v in symbols.user_variables()] == ["x", "y"]

    def test_declare_is_idempotent(self):
        """Declaring a name again returns the same cell."""
        symbols = SymbolTable()
        first = symbols.declare("x")
        assert symbols.declare("x") is first
        assert len(symbols) == 4

    def test_constants_interned(self):
        """Repeated literals share one cell."""
        symbols = SymbolTable()
        two = symbols.constant(2)
        assert two.name == "_const_2"
        assert two.value == 2
        assert symbols.constant(2) is two
        assert symbols.lookup_constant("_const_2") is two
        assert two.is_constant

    def test_underscore_names_do_not_alias_constants(self):
        """Source names spelled like constants get their own cells."""
        symbols = SymbolTable()
        seven = symbols.constant(7)
        one = symbols.declare(ONE)
        const_7 = symbols.declare("_const_7")
        assert one.address not in (symbols.one, symbols.zero, symbols.neg_one)
        assert const_7.address != seven.address
        assert not one.is_constant
        assert symbols.lookup(ONE) is one
        assert symbols.lookup_constant(ONE).address == symbols.one
        assert [v.name for v in symbols.user_variables()] == [ONE, "_const_7"]

    def test_literal_does_not_reseed_variable(self):
        """Interning a literal leaves a same-named variable's value alone."""
        symbols = SymbolTable()
        variable = symbols.declare("_const_9")
        constant = symbols.constant(9)
        assert constant is not variable
        assert variable.value == 0
        assert not variable.initialized
        assert constant.value == 9

    def test_uninitialized_upgrade(self):
        """An uninitialized variable takes a later initial value."""
        symbols = SymbolTable()
        symbols.declare("x")
        variable = symbols.declare("x", 7, initialized=True)
        assert variable.value == 7
        assert variable.initialized
        # Already initialized: left alone
        assert symbols.declare("x", 9, initialized=True).value == 7

    def test_values_masked(self):
        """Initial values are reduced to a byte."""
        symbols = SymbolTable()
        assert symbols.declare("x", 0x1FF, initialized=True).value == 0xFF

    def test_address_of(self):
        """address_of finds known names and raises for others."""
        symbols = SymbolTable()
        symbols.declare("x")
        assert symbols.address_of("x") == 0x83
        with pytest.raises(KeyError):
            symbols.address_of("y")

    def test_variable_band_exhausted(self):
        """The 73rd cell of 0x80-0xC7 does not exist."""
        symbols = SymbolTable()
        for i in range(0xC8 - 0x83):
            symbols.declare(f"v{i}")
        assert symbols.lookup("v68").address == 0xC7
        with pytest.raises(CapacityError) as exc_info:
            symbols.declare("overflow")
        assert exc_info.value.band == "variable"
        assert exc_info.value.limit == 0xC8


class TestTemps:
    """Tests for temp slot allocation."""

    def test_temps_never_reused(self):
        """Each allocation returns a new slot."""
        symbols = SymbolTable()
        slots = [symbols.allocate_temp() for _ in range(5)]
        assert slots == [0xC8, 0xC9, 0xCA, 0xCB, 0xCC]
        assert symbols.temps_used == 5

    def test_temp_band_exhausted(self):
        """0xC8-0xFF holds 56 temps and no more."""
        symbols = SymbolTable()
        for _ in range(56):
            last = symbols.allocate_temp()
        assert last == 0xFF
        with pytest.raises(CapacityError, match="temp space exhausted"):
            symbols.allocate_temp()

    def test_temps_do_not_touch_variables(self):
        """Temp allocation leaves the variable table alone."""
        symbols = SymbolTable()
        symbols.allocate_temp()
        assert len(symbols) == 3
