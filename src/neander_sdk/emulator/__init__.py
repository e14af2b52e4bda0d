"""
Neander Emulator
================

Executes 256-byte Neander memory images.

Components
----------
- **Memory**: the 256-cell byte store
- **NeanderCPU**: fetch-decode-execute core with instrumentation hooks
- **Emulator**: loading, step budget, breakpoints, stop reasons and traces

Example:
    >>> from neander_sdk.emulator import Emulator
    >>> emu = Emulator()
    >>> emu.load_image(bytes([0x20, 0x03, 0xF0, 0x80]))
    >>> emu.run().state.flag_n
    True
"""

from .cpu import CPUState, NeanderCPU, StepResult
from .emulator import Emulator, EmulatorConfig, RunResult, StopReason, TraceEntry
from .memory import Memory

__all__ = [
    "Emulator",
    "EmulatorConfig",
    "RunResult",
    "StopReason",
    "TraceEntry",
    "NeanderCPU",
    "CPUState",
    "StepResult",
    "Memory",
]
