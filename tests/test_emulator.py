"""
Neander Emulator Tests
======================

Tests for the Emulator orchestrator: loading, stop reasons, step budgets,
tracing, breakpoints and determinism.
"""

import pytest

from neander_sdk.emulator import Emulator, EmulatorConfig, StopReason


# LDA 0x80 / ADD 0x81 / STA 0x82 / HLT with 2 and 3 in the data cells
ADD_PROGRAM = bytes([0x20, 0x80, 0x30, 0x81, 0x10, 0x82, 0xF0]) + bytes(0x79) + bytes([2, 3])

# JMP 0x00
ENDLESS_LOOP = bytes([0x80, 0x00])


@pytest.fixture
def emu():
    """Fixture: emulator with ADD_PROGRAM loaded."""
    emulator = Emulator()
    emulator.load_image(ADD_PROGRAM)
    return emulator


# =============================================================================
# Configuration
# =============================================================================

class TestConfig:
    """Tests for EmulatorConfig."""

    def test_defaults(self):
        """Unbounded, tolerant and untraced by default."""
        config = EmulatorConfig()
        assert config.max_steps == 0
        assert not config.strict_opcodes
        assert not config.record_trace

    def test_negative_budget_rejected(self):
        """A negative step budget is invalid."""
        with pytest.raises(ValueError):
            EmulatorConfig(max_steps=-1)

    def test_frozen(self):
        """Configurations are immutable."""
        config = EmulatorConfig()
        with pytest.raises(AttributeError):
            config.max_steps = 5

    def test_stop_reason_text(self):
        """Stop reasons print in plain words."""
        assert str(StopReason.HALTED) == "halted"
        assert str(StopReason.STEP_LIMIT) == "step limit"
        assert str(StopReason.INVALID_OPCODE) == "invalid opcode"


# =============================================================================
# Running
# =============================================================================

class TestRun:
    """Tests for run() and its stop reasons."""

    def test_halted(self, emu):
        """A program ending in HLT stops with HALTED."""
        result = emu.run()
        assert result.reason is StopReason.HALTED
        assert result.halted
        assert result.steps == 4
        assert result.state.accumulator == 5
        assert emu.read_byte(0x82) == 5

    def test_step_limit(self):
        """An endless loop stops at the budget without error."""
        emu = Emulator(EmulatorConfig(max_steps=100))
        emu.load_image(ENDLESS_LOOP)
        result = emu.run()
        assert result.reason is StopReason.STEP_LIMIT
        assert result.steps == 100
        assert not result.halted

    def test_per_call_budget(self):
        """run(max_steps) overrides the configured budget."""
        emu = Emulator(EmulatorConfig(max_steps=100))
        emu.load_image(ENDLESS_LOOP)
        assert emu.run(max_steps=7).steps == 7
        assert emu.total_steps == 7

    def test_zero_means_unbounded(self):
        """A budget of 0 runs until HLT however long it takes."""
        # 255 iterations of: LDA c / ADD m1 / STA c / JZ end / JMP loop
        image = bytearray(256)
        image[:11] = bytes([0x20, 0x80, 0x30, 0x81, 0x10, 0x80, 0xA0, 0x0A, 0x80, 0x00, 0xF0])
        image[0x80] = 0xFF
        image[0x81] = 0xFF
        emu = Emulator(EmulatorConfig(max_steps=0))
        emu.load_image(bytes(image))
        result = emu.run()
        assert result.reason is StopReason.HALTED
        assert result.steps == 255 * 4 + 254 + 1
        assert emu.read_byte(0x80) == 0

    def test_invalid_opcode_strict(self):
        """Strict mode stops on an unassigned opcode."""
        emu = Emulator(EmulatorConfig(strict_opcodes=True))
        emu.load_image(bytes([0x00, 0xB0, 0xF0]))
        result = emu.run()
        assert result.reason is StopReason.INVALID_OPCODE
        assert result.steps == 1
        assert result.state.pc == 0x01

    def test_invalid_opcode_tolerant(self):
        """Tolerant mode steps over an unassigned opcode."""
        emu = Emulator()
        emu.load_image(bytes([0x00, 0xB0, 0xF0]))
        result = emu.run()
        assert result.reason is StopReason.HALTED
        assert result.steps == 3

    def test_single_step(self, emu):
        """step() runs exactly one instruction."""
        result = emu.step()
        assert result.mnemonic == "LDA"
        assert emu.state.pc == 0x02
        assert emu.total_steps == 1

    def test_halted_run_again(self, emu):
        """Running a halted machine reports HALTED without executing."""
        emu.run()
        result = emu.run()
        assert result.reason is StopReason.HALTED
        assert result.steps == 0


# =============================================================================
# Loading and Reset
# =============================================================================

class TestLoading:
    """Tests for image loading."""

    def test_image_is_copied(self):
        """The program cannot modify the caller's image."""
        image = bytearray(ADD_PROGRAM)
        emu = Emulator()
        emu.load_image(image)
        emu.run()
        assert emu.read_byte(0x82) == 5
        assert len(image) == len(ADD_PROGRAM)
        assert image == bytearray(ADD_PROGRAM)

    def test_load_resets_registers(self, emu):
        """Loading a new image clears registers and counters."""
        emu.run()
        emu.load_image(ENDLESS_LOOP)
        assert emu.state.accumulator == 0
        assert emu.state.pc == 0
        assert emu.total_steps == 0

    def test_load_file(self, tmp_path):
        """Images load from raw files."""
        path = tmp_path / "prog.bin"
        path.write_bytes(ADD_PROGRAM)
        emu = Emulator()
        emu.load_file(path)
        assert emu.run().state.accumulator == 5

    def test_load_oversized_file(self, tmp_path):
        """Files over 256 bytes are rejected."""
        path = tmp_path / "big.bin"
        path.write_bytes(bytes(300))
        with pytest.raises(ValueError):
            Emulator().load_file(path)

    def test_write_byte(self, emu):
        """Memory can be patched before a run."""
        emu.write_byte(0x81, 10)
        assert emu.run().state.accumulator == 12


# =============================================================================
# Trace and Determinism
# =============================================================================

class TestTrace:
    """Tests for recorded traces and reproducibility."""

    def test_trace_recorded(self):
        """Every executed instruction appears in the trace."""
        emu = Emulator(EmulatorConfig(record_trace=True))
        emu.load_image(ADD_PROGRAM)
        result = emu.run()
        assert [e.mnemonic for e in result.trace] == ["LDA", "ADD", "STA", "HLT"]
        assert [e.step for e in result.trace] == [1, 2, 3, 4]
        assert result.trace[1].accumulator == 5
        assert "ADD 0x81" in str(result.trace[1])

    def test_trace_off_by_default(self, emu):
        """No trace is collected unless asked for."""
        assert emu.run().trace == []

    def test_deterministic(self):
        """The same image gives the same trace and final state."""
        runs = []
        for _ in range(2):
            emu = Emulator(EmulatorConfig(record_trace=True))
            emu.load_image(ADD_PROGRAM)
            result = emu.run()
            runs.append((result.state, result.trace, emu.memory.snapshot()))
        assert runs[0] == runs[1]


# =============================================================================
# Breakpoints
# =============================================================================

class TestBreakpoints:
    """Tests for PC breakpoints."""

    def test_stops_before_breakpoint(self, emu):
        """run() stops with the PC on the breakpoint, unexecuted."""
        emu.add_breakpoint(0x04)
        result = emu.run()
        assert result.reason is StopReason.BREAKPOINT
        assert result.state.pc == 0x04
        assert result.steps == 2
        assert emu.read_byte(0x82) == 0

    def test_resume_from_breakpoint(self, emu):
        """The next run executes the breakpoint instruction and continues."""
        emu.add_breakpoint(0x04)
        emu.run()
        result = emu.run()
        assert result.reason is StopReason.HALTED
        assert result.steps == 2
        assert emu.total_steps == 4

    def test_breakpoint_hit_every_pass(self):
        """A breakpoint inside a loop stops on each pass."""
        emu = Emulator()
        emu.load_image(ENDLESS_LOOP)
        emu.add_breakpoint(0x00)
        for _ in range(3):
            result = emu.run()
            assert result.reason is StopReason.BREAKPOINT
            assert result.steps == 1

    def test_remove_breakpoint(self, emu):
        """Removed breakpoints no longer stop execution."""
        emu.add_breakpoint(0x02)
        emu.remove_breakpoint(0x02)
        assert emu.run().reason is StopReason.HALTED

    def test_clear_breakpoints(self, emu):
        """clear_breakpoints() drops them all."""
        emu.add_breakpoint(0x02)
        emu.add_breakpoint(0x04)
        emu.clear_breakpoints()
        assert emu.run().reason is StopReason.HALTED

    def test_step_ignores_breakpoints(self, emu):
        """Single stepping is not stopped by breakpoints."""
        emu.add_breakpoint(0x00)
        emu.step()
        assert emu.state.pc == 0x02
