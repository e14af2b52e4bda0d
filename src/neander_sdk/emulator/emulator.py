"""
Neander Emulator - Main Orchestrator
====================================

The Emulator class ties memory and CPU together behind a small API for
running and testing programs:

- Loading a 256-byte image from bytes or a file (always copied)
- Running with a step budget, single stepping, and PC breakpoints
- Reporting why execution stopped and, optionally, a full trace

Example usage:
    >>> from neander_sdk.emulator import Emulator, EmulatorConfig, StopReason
    >>> emu = Emulator(EmulatorConfig(max_steps=1000))
    >>> emu.load_image(bytes([0x20, 0x80, 0xF0]))
    >>> result = emu.run()
    >>> result.reason is StopReason.HALTED, result.steps
    (True, 2)

Stop reasons
------------
- HALTED: a HLT instruction executed
- STEP_LIMIT: the step budget ran out (not a failure)
- BREAKPOINT: the PC reached a breakpoint address
- INVALID_OPCODE: an unassigned opcode in strict mode

Runs are deterministic: the same image loaded fresh always produces the
same final state and trace.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Optional, Union
import logging

from .cpu import CPUState, NeanderCPU, StepResult
from .memory import Memory


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        max_steps: Default step budget for run(); 0 means unbounded
        strict_opcodes: Stop on unassigned opcodes instead of skipping them
        record_trace: Collect a TraceEntry for every executed instruction

    Example:
        >>> config = EmulatorConfig(max_steps=5000, record_trace=True)
    """
    max_steps: int = 0
    strict_opcodes: bool = False
    record_trace: bool = False

    def __post_init__(self):
        if self.max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {self.max_steps}")


class StopReason(Enum):
    """Why run() returned."""
    HALTED = auto()
    STEP_LIMIT = auto()
    BREAKPOINT = auto()
    INVALID_OPCODE = auto()

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")


@dataclass(frozen=True)
class TraceEntry:
    """
    One executed instruction, with register state after it ran.

    Attributes:
        step: 1-based instruction count since reset
        pc: Address of the instruction
        opcode: Raw opcode byte
        mnemonic: Decoded mnemonic (None for unassigned opcodes)
        operand: Operand byte, if any
        accumulator: AC after execution
        flag_n: N after execution
        flag_z: Z after execution
    """
    step: int
    pc: int
    opcode: int
    mnemonic: Optional[str]
    operand: Optional[int]
    accumulator: int
    flag_n: bool
    flag_z: bool

    @classmethod
    def from_step(cls, step: int, result: StepResult) -> "TraceEntry":
        return cls(
            step=step,
            pc=result.pc,
            opcode=result.opcode,
            mnemonic=result.mnemonic,
            operand=result.operand,
            accumulator=result.accumulator,
            flag_n=result.flag_n,
            flag_z=result.flag_z,
        )

    def __str__(self) -> str:
        text = self.mnemonic or f"DB 0x{self.opcode:02X}"
        if self.operand is not None:
            text = f"{text} 0x{self.operand:02X}"
        return (
            f"{self.step:5d}  {self.pc:02X}  {text:<10} "
            f"AC={self.accumulator:02X} N={int(self.flag_n)} Z={int(self.flag_z)}"
        )


@dataclass
class RunResult:
    """
    Outcome of run().

    Attributes:
        reason: Why execution stopped
        steps: Instructions executed by this run
        state: Register state at the stop
        trace: Executed instructions (empty unless record_trace is on)
    """
    reason: StopReason
    steps: int
    state: CPUState
    trace: list[TraceEntry] = field(default_factory=list)

    @property
    def halted(self) -> bool:
        return self.reason is StopReason.HALTED


class Emulator:
    """
    Neander emulator.

    Example:
        emu = Emulator(EmulatorConfig(max_steps=10_000))
        emu.load_file("soma.bin")
        result = emu.run()
        print(result.state, emu.memory.dump(0x80, 0x90))
    """

    def __init__(self, config: Optional[EmulatorConfig] = None):
        self.config = config or EmulatorConfig()
        self.memory = Memory()
        self.cpu = NeanderCPU(self.memory, strict_opcodes=self.config.strict_opcodes)

        self._breakpoints: set[int] = set()
        self._break_hit = False
        self._resume_pc: Optional[int] = None
        self._total_steps = 0
        self._trace: list[TraceEntry] = []

        self.cpu.on_instruction = self._instruction_hook
        self.cpu.on_step = self._step_hook

    # ========================================
    # Hooks
    # ========================================

    def _instruction_hook(self, pc: int, opcode: int) -> bool:
        if pc not in self._breakpoints:
            return True
        # A run that starts on a breakpoint executes it instead of stopping again
        if pc == self._resume_pc:
            self._resume_pc = None
            return True
        self._break_hit = True
        return False

    def _step_hook(self, result: StepResult) -> None:
        self._resume_pc = None
        self._total_steps += 1
        if self.config.record_trace:
            self._trace.append(TraceEntry.from_step(self._total_steps, result))

    # ========================================
    # Loading
    # ========================================

    def load_image(self, image: bytes | bytearray) -> None:
        """Copy an image into memory and reset the CPU."""
        self.memory.load(image)
        self.reset()
        logger.debug(f"Loaded {len(image)} byte image")

    def load_file(self, path: Union[str, Path]) -> None:
        """
        Load a raw image file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is larger than memory
        """
        self.load_image(Path(path).read_bytes())

    def reset(self) -> None:
        """Reset registers, flags, step count and trace; memory is kept."""
        self.cpu.reset()
        self._break_hit = False
        self._resume_pc = None
        self._total_steps = 0
        self._trace = []

    # ========================================
    # Execution
    # ========================================

    def step(self) -> StepResult:
        """Execute one instruction, ignoring breakpoints and the budget."""
        result = self.cpu.step()
        if self.cpu.fault is None:
            self._step_hook(result)
        return result

    def run(self, max_steps: Optional[int] = None) -> RunResult:
        """
        Run until HLT, the step budget, a breakpoint or a strict-mode fault.

        Args:
            max_steps: Step budget for this call (defaults to the configured
                one); 0 means unbounded

        Returns:
            RunResult describing the stop
        """
        budget = self.config.max_steps if max_steps is None else max_steps
        trace_start = len(self._trace)

        self._break_hit = False
        self._resume_pc = self.cpu.pc

        steps = self.cpu.execute(budget or None)

        if self.cpu.halted:
            reason = StopReason.HALTED
        elif self.cpu.fault is not None:
            reason = StopReason.INVALID_OPCODE
        elif self._break_hit:
            reason = StopReason.BREAKPOINT
        else:
            reason = StopReason.STEP_LIMIT

        logger.debug(f"Stopped after {steps} steps: {reason} ({self.cpu.state})")
        return RunResult(
            reason=reason,
            steps=steps,
            state=self.cpu.get_state(),
            trace=self._trace[trace_start:],
        )

    # ========================================
    # Breakpoints
    # ========================================

    def add_breakpoint(self, address: int) -> None:
        """Stop run() before executing the instruction at address."""
        self._breakpoints.add(address & 0xFF)

    def remove_breakpoint(self, address: int) -> None:
        self._breakpoints.discard(address & 0xFF)

    def clear_breakpoints(self) -> None:
        self._breakpoints.clear()

    # ========================================
    # State Access
    # ========================================

    @property
    def state(self) -> CPUState:
        return self.cpu.get_state()

    @property
    def total_steps(self) -> int:
        return self._total_steps

    @property
    def trace(self) -> list[TraceEntry]:
        return list(self._trace)

    def read_byte(self, address: int) -> int:
        return self.memory.read(address)

    def write_byte(self, address: int, value: int) -> None:
        self.memory.write(address, value)

    def __repr__(self) -> str:
        return f"Emulator({self.cpu.state}, steps={self._total_steps})"
