"""
Neander SDK - Test Configuration
================================

Shared fixtures for the test suite:
- compile_program: PROGRAMA source -> CompilerResult
- build_image: PROGRAMA source -> 256-byte image
- run_program: PROGRAMA source -> (RunResult, Emulator)
"""

import pytest

from neander_sdk.assembler import Assembler
from neander_sdk.compiler import CompilerOptions, NeanderCompiler
from neander_sdk.emulator import Emulator, EmulatorConfig


# Generous enough for the slowest division (255 / 1)
TEST_STEP_BUDGET = 20_000


@pytest.fixture
def compile_program():
    """Fixture: compile PROGRAMA source with optional CompilerOptions."""
    def _compile(source: str, options: CompilerOptions | None = None):
        return NeanderCompiler(options).compile_source(source, "test.txt")
    return _compile


@pytest.fixture
def build_image(compile_program):
    """Fixture: compile and assemble PROGRAMA source into an image."""
    def _build(source: str, options: CompilerOptions | None = None) -> bytes:
        result = compile_program(source, options)
        return Assembler().assemble(result.assembly, "test.asm")
    return _build


@pytest.fixture
def run_program(build_image):
    """Fixture: compile, assemble and run PROGRAMA source."""
    def _run(source: str, max_steps: int = TEST_STEP_BUDGET):
        emu = Emulator(EmulatorConfig(max_steps=max_steps))
        emu.load_image(build_image(source))
        return emu.run(), emu
    return _run
