"""
Neander Code Generator
======================

Emits Neander instructions while the parser walks the source. There is no
syntax tree: every grammar rule calls into this module as soon as it has
matched, and gets back the address that holds its value.

Code Generation Strategy
------------------------
Every value lives in memory. Each operand is first copied into a fresh temp
slot, and each operator writes its result into another fresh slot. Slots are
never reused.

The machine has no subtract, multiply or divide, so those are synthesized:

| Operation | Expansion                                              |
|-----------|--------------------------------------------------------|
| -x        | LDA x / NOT / ADD _one / STA dst                       |
| a - b     | b = -b (in place), then a + b                          |
| a * b     | add b to dst, a times (counter loop)                   |
| a / b     | count how many whole b fit in a (countdown loop)       |

Jump Targets
------------
Instructions are 1 or 2 bytes long, so a jump target is the running byte
offset of the code, never `index * 2`. The `legacy_jump_targets` switch
brings back the index arithmetic for comparison with old output; it
mis-targets any jump emitted after a NOT or HLT.

Backpatching
------------
Loop exits are not known when the conditional jump is emitted. The jump is
emitted with the UNRESOLVED placeholder and patched exactly once, with the
address of the next instruction, after the loop body is complete.

Generated Assembly Format
-------------------------
    ; program: soma
    .DATA
    0x80 0x00        ; _zero
    0x81 0x01        ; _one
    0x82 0xFF        ; _neg_one
    0x83 0x02        ; _const_2
    .CODE
        LDA 0x83
        STA 0xC8
        ...
        HLT
"""

from dataclasses import dataclass
from typing import Optional
import logging

from neander_sdk.assembler.opcodes import Opcode
from neander_sdk.compiler.errors import CapacityError, InternalCompilerError
from neander_sdk.compiler.symbols import SymbolTable


logger = logging.getLogger(__name__)


# Operand value of a jump whose target is not known yet.
UNRESOLVED = -1


@dataclass
class Instruction:
    """
    One emitted instruction.

    Attributes:
        opcode: The Neander opcode
        operand: Address operand, None for NOP/NOT/HLT, UNRESOLVED while a
            jump waits for its backpatch
        index: Position in the instruction list
        address: Byte address of the opcode byte
    """
    opcode: Opcode
    operand: Optional[int]
    index: int
    address: int

    @property
    def is_resolved(self) -> bool:
        return self.operand != UNRESOLVED

    @property
    def size(self) -> int:
        return self.opcode.size

    def __str__(self) -> str:
        if self.operand is None:
            return self.opcode.name
        if self.operand == UNRESOLVED:
            return f"{self.opcode.name} ?"
        return f"{self.opcode.name} 0x{self.operand:02X}"


class CodeGenerator:
    """
    Append-only instruction emitter.

    Usage:
        symbols = SymbolTable()
        gen = CodeGenerator(symbols)
        gen.add(a, b, dst)
        gen.finish()
        text = gen.to_assembly(symbols, "soma")
    """

    def __init__(
        self,
        symbols: SymbolTable,
        code_limit: Optional[int] = None,
        legacy_jump_targets: bool = False,
    ):
        """
        Args:
            symbols: Table supplying constants and temp slots
            code_limit: First address code may not reach (defaults to the
                start of the variable band)
            legacy_jump_targets: Compute jump targets as index * 2
        """
        self.symbols = symbols
        self.code_limit = symbols.variable_base if code_limit is None else code_limit
        self.legacy_jump_targets = legacy_jump_targets

        self.instructions: list[Instruction] = []
        self._byte_offset = 0
        self._finished = False

    # =========================================================================
    # Emission Primitives
    # =========================================================================

    @property
    def byte_offset(self) -> int:
        """Byte address the next instruction will occupy."""
        return self._byte_offset

    def here(self) -> int:
        """Jump target for the next instruction to be emitted."""
        if self.legacy_jump_targets:
            return (len(self.instructions) * 2) & 0xFF
        return self._byte_offset

    def emit(self, opcode: Opcode, operand: Optional[int] = None) -> Instruction:
        """
        Append an instruction.

        Raises:
            CapacityError: The code would reach into the variable band
            InternalCompilerError: Operand missing or unexpected for opcode
        """
        if self._finished:
            raise InternalCompilerError("instruction emitted after finish()")
        if opcode.has_operand != (operand is not None):
            raise InternalCompilerError(
                f"{opcode.name} emitted with operand {operand!r}"
            )
        if self._byte_offset + opcode.size > self.code_limit:
            raise CapacityError("code", self.code_limit)

        instr = Instruction(opcode, operand, len(self.instructions), self._byte_offset)
        self.instructions.append(instr)
        self._byte_offset += opcode.size
        return instr

    def emit_placeholder(self, opcode: Opcode) -> Instruction:
        """Append a jump whose target will be backpatched."""
        return self.emit(opcode, UNRESOLVED)

    def backpatch(self, instr: Instruction, target: Optional[int] = None) -> None:
        """
        Fill in a placeholder operand, by default with here().

        Raises:
            InternalCompilerError: The operand was already resolved
        """
        if instr.is_resolved:
            raise InternalCompilerError(
                f"instruction {instr.index} ({instr}) patched twice"
            )
        instr.operand = self.here() if target is None else target
        logger.debug(f"backpatched #{instr.index} {instr.opcode.name} -> 0x{instr.operand:02X}")

    # =========================================================================
    # Data Movement
    # =========================================================================

    def copy(self, src: int, dst: int) -> None:
        self.emit(Opcode.LDA, src)
        self.emit(Opcode.STA, dst)

    def load_into_temp(self, address: int) -> int:
        """Copy a cell into a fresh temp slot and return the slot."""
        temp = self.symbols.allocate_temp()
        self.copy(address, temp)
        return temp

    def load(self, address: int) -> None:
        """Leave a value in the accumulator."""
        self.emit(Opcode.LDA, address)

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def negate(self, src: int, dst: int) -> None:
        """dst = -src (two's complement)."""
        self.emit(Opcode.LDA, src)
        self.emit(Opcode.NOT)
        self.emit(Opcode.ADD, self.symbols.one)
        self.emit(Opcode.STA, dst)

    def add(self, left: int, right: int, dst: int) -> None:
        self.emit(Opcode.LDA, left)
        self.emit(Opcode.ADD, right)
        self.emit(Opcode.STA, dst)

    def subtract(self, left: int, right: int, dst: int) -> None:
        """dst = left - right. Overwrites right with its negation."""
        self.negate(right, right)
        self.add(left, right, dst)

    def multiply(self, left: int, right: int, dst: int) -> None:
        """
        dst = left * right (mod 256).

            dst = 0; counter = left
            loop:  if counter == 0 goto exit
                   dst += right; counter -= 1
                   goto loop
            exit:
        """
        counter = self.symbols.allocate_temp()

        self.copy(self.symbols.zero, dst)
        self.copy(left, counter)

        loop = self.here()
        self.emit(Opcode.LDA, counter)
        exit_jump = self.emit_placeholder(Opcode.JZ)
        self.add(dst, right, dst)
        self.add(counter, self.symbols.neg_one, counter)
        self.emit(Opcode.JMP, loop)

        self.backpatch(exit_jump)

    def divide(self, left: int, right: int, dst: int) -> None:
        """
        dst = left // right (unsigned).

        Counts the remainder down one unit at a time while a second counter
        tracks progress through the current group of `right` units; each
        completed group bumps the quotient:

            dst = -1; rem = left
            group: dst += 1; count = right
            unit:  if rem == 0 goto exit
                   rem -= 1; count -= 1
                   if count == 0 goto group
                   goto unit
            exit:

        Correct for every left in 0..255 and right in 1..255. A zero divisor
        makes count wrap to 255, so rem runs out first and the quotient is 0.
        """
        remainder = self.symbols.allocate_temp()
        count = self.symbols.allocate_temp()

        self.copy(self.symbols.neg_one, dst)
        self.copy(left, remainder)

        group = self.here()
        self.add(dst, self.symbols.one, dst)
        self.copy(right, count)

        unit = self.here()
        self.emit(Opcode.LDA, remainder)
        exit_jump = self.emit_placeholder(Opcode.JZ)
        self.emit(Opcode.ADD, self.symbols.neg_one)
        self.emit(Opcode.STA, remainder)
        self.add(count, self.symbols.neg_one, count)
        self.emit(Opcode.JZ, group)
        self.emit(Opcode.JMP, unit)

        self.backpatch(exit_jump)

    def halt(self) -> None:
        self.emit(Opcode.HLT)

    # =========================================================================
    # Completion and Output
    # =========================================================================

    def finish(self) -> list[Instruction]:
        """
        Append the final HLT and check every jump was patched.

        Raises:
            InternalCompilerError: A placeholder survived
            CapacityError: No room for the HLT
        """
        self.halt()
        self._finished = True

        unresolved = [i for i in self.instructions if not i.is_resolved]
        if unresolved:
            raise InternalCompilerError(
                "unresolved jump placeholder(s) at "
                + ", ".join(f"#{i.index}" for i in unresolved)
            )

        logger.debug(
            f"Generated {len(self.instructions)} instructions, "
            f"{self._byte_offset} bytes, {self.symbols.temps_used} temps"
        )
        return self.instructions

    def to_assembly(
        self,
        symbols: Optional[SymbolTable] = None,
        program_name: Optional[str] = None,
        comments: bool = True,
    ) -> str:
        """
        Serialize the data and code sections as assembly text.

        With comments on, data lines carry the variable name and operands
        naming a variable are annotated with it.
        """
        symbols = symbols or self.symbols
        names = {v.address: v.name for v in symbols}
        lines: list[str] = []

        if comments and program_name:
            lines.append(f"; program: {program_name}")

        lines.append(".DATA")
        for variable in symbols:
            line = f"0x{variable.address:02X} 0x{variable.value:02X}"
            if comments:
                line = f"{line:<17}; {variable.name}"
            lines.append(line)

        lines.append(".CODE")
        for instr in self.instructions:
            line = f"    {instr}"
            if comments and instr.operand in names and not instr.opcode.name.startswith("J"):
                line = f"{line:<17}; {names[instr.operand]}"
            lines.append(line)

        return "\n".join(lines) + "\n"
