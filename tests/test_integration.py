# =============================================================================
# test_integration.py - End-to-End Toolchain Tests
# =============================================================================
# PROGRAMA source -> assembly -> image -> emulator, checking the values the
# compiled programs actually compute.
# =============================================================================

import pytest

from neander_sdk.assembler import Assembler
from neander_sdk.compiler import CompilerOptions, NeanderCompiler
from neander_sdk.disassembler import NeanderDisassembler
from neander_sdk.emulator import Emulator, EmulatorConfig, StopReason


def program(body: str, name: str = "t") -> str:
    """Wrap statements in a PROGRAMA header and FIM."""
    return f'PROGRAMA "{name}":\nINICIO\n{body}\nFIM\n'


class Kernel:
    """
    A compiled `x = a <op> b` program whose inputs are patched into the
    image before each run, so one compilation serves a whole grid.
    """

    def __init__(self, operator: str):
        result = NeanderCompiler().compile_source(program(f"x = a {operator} b"))
        self.image = Assembler().assemble(result.assembly)
        self.a = result.symbols.address_of("a")
        self.b = result.symbols.address_of("b")
        self.x = result.symbols.address_of("x")

    def __call__(self, a: int, b: int) -> int:
        emu = Emulator(EmulatorConfig(max_steps=20_000))
        emu.load_image(self.image)
        emu.write_byte(self.a, a)
        emu.write_byte(self.b, b)
        result = emu.run()
        assert result.reason is StopReason.HALTED
        return emu.read_byte(self.x)


@pytest.fixture(scope="module")
def multiply():
    """Fixture: compiled multiplication kernel."""
    return Kernel("*")


@pytest.fixture(scope="module")
def divide():
    """Fixture: compiled division kernel."""
    return Kernel("/")


# =============================================================================
# Basic Programs
# =============================================================================

class TestBasicPrograms:
    """Tests for small complete programs."""

    def test_sum(self, run_program):
        """2 + 3 leaves 5 in AC with both flags clear."""
        result, emu = run_program(program("x = 2 + 3\nRES = x"))
        assert result.reason is StopReason.HALTED
        assert result.state.accumulator == 5
        assert not result.state.flag_n
        assert not result.state.flag_z

    def test_variable_in_memory(self, run_program, compile_program):
        """Assigned values land in the variable's cell."""
        source = program("x = 2 + 3")
        _, emu = run_program(source)
        address = compile_program(source).symbols.address_of("x")
        assert emu.read_byte(address) == 5

    @pytest.mark.parametrize("body,expected", [
        ("RES = 5 - 3", 2),
        ("RES = 3 - 5", 254),
        ("RES = -3", 253),
        ("RES = - - 3", 3),
        ("RES = 0 - 0", 0),
        ("RES = 200 + 100", 44),
        ("RES = 2 + 3 * 4", 14),
        ("RES = (2 + 3) * 4", 20),
        ("RES = 10 - 3 - 2", 5),
        ("RES = 100 / 5 / 2", 10),
        ("RES = 7 / 2", 3),
        ("RES = 6 / 2", 3),
        ("RES = 0 / 5", 0),
        ("RES = 255 / 1", 255),
        ("RES = 255 / 255", 1),
        ("RES = 1 / 2", 0),
        ("RES = 16 * 16", 0),
        ("RES = 300", 44),
    ])
    def test_expressions(self, run_program, body, expected):
        """Operators follow precedence, associativity and byte arithmetic."""
        result, _ = run_program(program(body))
        assert result.reason is StopReason.HALTED
        assert result.state.accumulator == expected

    def test_statements_in_sequence(self, run_program):
        """Later statements see earlier assignments."""
        result, _ = run_program(program("a = 6\nb = a * 7\nc = b - a\nRES = c / 4"))
        assert result.state.accumulator == 9

    def test_reassignment(self, run_program):
        """A variable can be assigned more than once."""
        result, _ = run_program(program("x = 1\nx = x + 1\nx = x * 10\nRES = x"))
        assert result.state.accumulator == 20

    def test_negative_result_flag(self, run_program):
        """A result with bit 7 set raises N."""
        result, _ = run_program(program("RES = 0 - 1"))
        assert result.state.accumulator == 0xFF
        assert result.state.flag_n

    def test_zero_result_flag(self, run_program):
        """A zero result raises Z."""
        result, _ = run_program(program("RES = 4 - 4"))
        assert result.state.flag_z

    def test_division_by_zero_yields_zero(self, run_program):
        """Dividing by zero terminates with 0."""
        result, _ = run_program(program("RES = 9 / 0"))
        assert result.reason is StopReason.HALTED
        assert result.state.accumulator == 0

    @pytest.mark.parametrize("body,expected", [
        ("_one = 5\nRES = 0 - 1", 255),
        ("_zero = 9\nRES = 3 * 4", 12),
        ("_neg_one = 1\nRES = 7 / 2", 3),
        ("_const_7 = 2\nRES = 7", 7),
        ("_const_7 = 2\nRES = _const_7 + 7", 9),
    ])
    def test_underscore_variables_keep_constants_intact(self, run_program, body, expected):
        """Variables named like compiler constants do not overwrite them."""
        result, _ = run_program(program(body))
        assert result.reason is StopReason.HALTED
        assert result.state.accumulator == expected

    def test_skipped_characters_harmless(self, run_program):
        """Stray characters do not change the program."""
        result, _ = run_program(program("x = 2 # + 3 @\nRES = x"))
        assert result.state.accumulator == 5


# =============================================================================
# Arithmetic Grids
# =============================================================================

class TestMultiplication:
    """Tests for the synthesized multiply loop."""

    @pytest.mark.parametrize("a", range(16))
    def test_small_grid(self, multiply, a):
        """a * b for every a, b in 0..15."""
        for b in range(16):
            assert multiply(a, b) == a * b, (a, b)

    @pytest.mark.parametrize("b", [0, 1, 2, 3, 128, 255])
    def test_wraps_modulo_256(self, multiply, b):
        """Products wrap around at 256."""
        for a in range(0, 256, 17):
            assert multiply(a, b) == (a * b) % 256, (a, b)


class TestDivision:
    """Tests for the synthesized divide loop."""

    DIVISORS = [1, 2, 3, 5, 7, 10, 16, 100, 127, 128, 254, 255]

    @pytest.mark.parametrize("b", DIVISORS)
    def test_quotients(self, divide, b):
        """a / b is the unsigned floor quotient."""
        for a in list(range(0, 256, 5)) + [254, 255]:
            assert divide(a, b) == a // b, (a, b)

    @pytest.mark.parametrize("a", [0, 1, 2, 127, 128, 254, 255])
    def test_every_divisor(self, divide, a):
        """Edge dividends against every non-zero divisor."""
        for b in range(1, 256):
            assert divide(a, b) == a // b, (a, b)

    @pytest.mark.parametrize("a", [0, 1, 100, 255])
    def test_zero_divisor(self, divide, a):
        """A zero divisor gives 0 instead of hanging."""
        assert divide(a, 0) == 0


# =============================================================================
# Toolchain Agreement
# =============================================================================

class TestToolchain:
    """Tests that compiler, assembler and disassembler agree."""

    SOURCE = program("x = 6 * 7\ny = x / 5\nRES = -(x - y)")

    def test_disassembly_matches_compiler(self, compile_program):
        """Disassembling the image reproduces the emitted instructions."""
        result = compile_program(self.SOURCE)
        image = Assembler().assemble(result.assembly)
        instructions = NeanderDisassembler().disassemble(image, count=len(result.instructions))
        assert [i.text for i in instructions] == [str(i) for i in result.instructions]

    def test_image_layout(self, build_image, compile_program):
        """Code sits below 0x80 and the data band holds the constants."""
        result = compile_program(self.SOURCE)
        image = build_image(self.SOURCE)
        assert result.code_size <= 0x80
        assert image[result.code_size:0x80] == bytes(0x80 - result.code_size)
        assert image[0x80:0x83] == bytes([0x00, 0x01, 0xFF])

    def test_bare_assembly_runs_the_same(self, build_image):
        """Comments in the assembly do not affect the image."""
        plain = build_image(self.SOURCE, CompilerOptions(output_comments=False))
        assert plain == build_image(self.SOURCE)

    def test_legacy_targets_differ(self, compile_program, run_program):
        """Legacy jump arithmetic changes the image once a NOT precedes a loop."""
        source = program("y = 1 - 1\nx = 3 * 4\nRES = x")
        fixed = compile_program(source)
        legacy = compile_program(source, CompilerOptions(legacy_jump_targets=True))
        assert fixed.assembly != legacy.assembly
        result, _ = run_program(source)
        assert result.state.accumulator == 12

    def test_step_limit_on_compiled_program(self, build_image):
        """A tight budget stops a long division early."""
        emu = Emulator(EmulatorConfig(max_steps=50))
        emu.load_image(build_image(program("RES = 255 / 1")))
        result = emu.run()
        assert result.reason is StopReason.STEP_LIMIT
        assert result.steps == 50
