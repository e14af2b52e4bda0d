"""
Neander CPU
===========

Fetch-decode-execute core of the Neander accumulator machine.

Registers
---------
- AC: 8-bit accumulator
- PC: 8-bit program counter (arithmetic wraps modulo 256)
- N: negative flag, bit 7 of AC
- Z: zero flag, AC == 0

N and Z are recomputed by LDA, ADD, OR, AND and NOT only; every other
instruction leaves them alone.

Instruction Effects
-------------------
| Mnemonic | Effect                       | Next PC            |
|----------|------------------------------|--------------------|
| NOP      | none                         | PC + 1             |
| STA a    | mem[a] = AC                  | PC + 2             |
| LDA a    | AC = mem[a]                  | PC + 2             |
| ADD a    | AC = (AC + mem[a]) mod 256   | PC + 2             |
| OR a     | AC = AC | mem[a]             | PC + 2             |
| AND a    | AC = AC & mem[a]             | PC + 2             |
| NOT      | AC = ~AC mod 256             | PC + 1             |
| JMP a    | jump                         | a                  |
| JN a     | jump if N                    | a or PC + 2        |
| JZ a     | jump if Z                    | a or PC + 2        |
| HLT      | halt                         | PC (stays on HLT)  |

Unassigned opcode nibbles behave as one-byte NOPs unless strict_opcodes is
set, in which case the CPU faults on them without advancing.

Instrumentation hooks:
- on_instruction(pc, opcode) -> bool: called before each instruction inside
  execute(); return False to stop
- on_step(result): called after each executed instruction
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging

from neander_sdk.assembler.opcodes import MEMORY_SIZE, decode_instruction
from neander_sdk.emulator.memory import Memory


logger = logging.getLogger(__name__)


@dataclass
class CPUState:
    """
    Register state.

    Attributes:
        accumulator: AC, 0-255
        pc: Program counter, 0-255
        flag_n: Negative flag
        flag_z: Zero flag
    """
    accumulator: int = 0
    pc: int = 0
    flag_n: bool = False
    flag_z: bool = False

    def __str__(self) -> str:
        return (
            f"AC=0x{self.accumulator:02X} PC=0x{self.pc:02X} "
            f"N={int(self.flag_n)} Z={int(self.flag_z)}"
        )


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of one fetch-decode-execute cycle.

    Attributes:
        pc: Address the instruction was fetched from
        opcode: Raw opcode byte
        mnemonic: Decoded mnemonic, None for an unassigned opcode
        operand: Operand byte, None for 1-byte instructions
        accumulator: AC after execution
        flag_n: N after execution
        flag_z: Z after execution
        halted: True if this was HLT
    """
    pc: int
    opcode: int
    mnemonic: Optional[str]
    operand: Optional[int]
    accumulator: int
    flag_n: bool
    flag_z: bool
    halted: bool = False

    @property
    def valid(self) -> bool:
        return self.mnemonic is not None


class NeanderCPU:
    """
    Neander CPU with instrumentation support.

    Example:
        >>> mem = Memory(bytes([0x20, 0x04, 0x60, 0xF0, 0xFF]))
        >>> cpu = NeanderCPU(mem)
        >>> cpu.execute()
        3
        >>> cpu.accumulator, cpu.flag_z
        (0, True)
    """

    def __init__(self, memory: Memory, strict_opcodes: bool = False):
        self.memory = memory
        self.strict_opcodes = strict_opcodes
        self.state = CPUState()

        self.halted = False
        # Opcode byte the CPU faulted on (strict mode only)
        self.fault: Optional[int] = None

        # on_instruction(pc, opcode) -> bool: return False to stop execution
        self.on_instruction: Optional[Callable[[int, int], bool]] = None
        # on_step(result): observe each executed instruction
        self.on_step: Optional[Callable[[StepResult], None]] = None

    # ========================================
    # Register Properties
    # ========================================

    @property
    def accumulator(self) -> int:
        return self.state.accumulator

    @accumulator.setter
    def accumulator(self, value: int) -> None:
        self.state.accumulator = value & 0xFF

    @property
    def pc(self) -> int:
        return self.state.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.pc = value % MEMORY_SIZE

    @property
    def flag_n(self) -> bool:
        return self.state.flag_n

    @property
    def flag_z(self) -> bool:
        return self.state.flag_z

    def _set_accumulator(self, value: int) -> None:
        """Write AC and recompute N and Z."""
        self.accumulator = value
        self.state.flag_n = (self.accumulator & 0x80) != 0
        self.state.flag_z = self.accumulator == 0

    def reset(self) -> None:
        """Clear registers and flags; memory is untouched."""
        self.state = CPUState()
        self.halted = False
        self.fault = None

    def get_state(self) -> CPUState:
        """Return a copy of the register state."""
        return CPUState(**vars(self.state))

    # ========================================
    # Execution
    # ========================================

    def step(self) -> StepResult:
        """
        Execute exactly one instruction (hooks are not consulted).

        A halted CPU stays on its HLT; a faulted CPU stays on the bad opcode.
        """
        pc = self.pc
        byte = self.memory.read(pc)
        decoded = decode_instruction(self.memory, pc)

        if decoded is None:
            if self.strict_opcodes:
                self.fault = byte
                logger.warning(f"invalid opcode 0x{byte:02X} at 0x{pc:02X}")
                return self._result(pc, byte, None, None)
            logger.debug(f"unassigned opcode 0x{byte:02X} at 0x{pc:02X} treated as NOP")
            self.pc = pc + 1
            return self._result(pc, byte, None, None)

        operand = decoded.operand
        next_pc = pc + decoded.size

        match decoded.mnemonic:
            case "NOP":
                pass
            case "STA":
                self.memory.write(operand, self.accumulator)
            case "LDA":
                self._set_accumulator(self.memory.read(operand))
            case "ADD":
                self._set_accumulator(self.accumulator + self.memory.read(operand))
            case "OR":
                self._set_accumulator(self.accumulator | self.memory.read(operand))
            case "AND":
                self._set_accumulator(self.accumulator & self.memory.read(operand))
            case "NOT":
                self._set_accumulator(~self.accumulator)
            case "JMP":
                next_pc = operand
            case "JN":
                if self.flag_n:
                    next_pc = operand
            case "JZ":
                if self.flag_z:
                    next_pc = operand
            case "HLT":
                self.halted = True
                next_pc = pc

        self.pc = next_pc
        return self._result(pc, byte, decoded.mnemonic, operand)

    def execute(self, max_steps: Optional[int] = None) -> int:
        """
        Run until HLT, a fault, a hook veto, or max_steps instructions.

        Args:
            max_steps: Instruction budget; None runs without a bound

        Returns:
            Number of instructions executed (HLT included)
        """
        steps = 0
        while not self.halted and self.fault is None:
            if max_steps is not None and steps >= max_steps:
                break
            if self.on_instruction and not self.on_instruction(self.pc, self.memory.read(self.pc)):
                break

            result = self.step()
            if self.fault is not None:
                break

            steps += 1
            if self.on_step:
                self.on_step(result)

        return steps

    def _result(self, pc: int, byte: int, mnemonic: Optional[str], operand: Optional[int]) -> StepResult:
        return StepResult(
            pc=pc,
            opcode=byte,
            mnemonic=mnemonic,
            operand=operand,
            accumulator=self.accumulator,
            flag_n=self.flag_n,
            flag_z=self.flag_z,
            halted=self.halted,
        )
