"""
Neander Assembler - Main Interface
==================================

The Assembler class coordinates the line parser and the two-pass code
generator to turn Neander assembly text into a 256-byte memory image.

Example Usage
-------------
>>> from neander_sdk.assembler import Assembler
>>> asm = Assembler()
>>> image = asm.assemble('''
... .DATA
... 0x80 0x05
... .CODE
...     LDA 0x80
...     HLT
... ''')
>>> len(image)
256
>>> image[:3].hex()
'2080f0'

Command-Line Usage
------------------
    $ nasm prog.asm -o prog.bin -l prog.lst

Options:
    -o, --output FILE      Output image file
    -l, --listing FILE     Generate listing file
    -v, --verbose          Verbose output
"""

from pathlib import Path
import logging

from neander_sdk.assembler.codegen import CodeGenerator
from neander_sdk.assembler.parser import parse_source


logger = logging.getLogger(__name__)


class Assembler:
    """
    Neander assembler.

    Every call to assemble() starts from a fresh NOP-filled image; nothing
    carries over between invocations except the most recent results, which
    the get_* and write_* methods expose.
    """

    def __init__(self):
        self._codegen = CodeGenerator()

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source text.

        Args:
            source: Assembly source text
            filename: Name used in error messages

        Returns:
            The 256-byte memory image

        Raises:
            EncodingError: On the first malformed line (no image is produced)
        """
        statements = parse_source(source, filename)
        logger.debug(f"Parsed {len(statements)} statements from {filename}")

        image = self._codegen.generate(statements)
        logger.debug(f"Assembled {self._codegen.get_code_size()} bytes of code")

        return image

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble a source file.

        Raises:
            EncodingError: If assembly fails
            FileNotFoundError: If the source file does not exist
        """
        filepath = Path(filepath)
        logger.debug(f"Assembling {filepath}")
        return self.assemble(filepath.read_text(), str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_image(self) -> bytes:
        """Get the most recently assembled image."""
        return self._codegen.get_image()

    def get_labels(self) -> dict[str, int]:
        """Get label name -> byte address."""
        return self._codegen.get_labels()

    def get_code_size(self) -> int:
        """Get the number of bytes spanned by the code section."""
        return self._codegen.get_code_size()

    def get_listing(self) -> str:
        return self._codegen.get_listing()

    def write_binary(self, filepath: str | Path) -> None:
        """Write the raw 256-byte image (no header)."""
        image = self.get_image()
        Path(filepath).write_bytes(image)
        logger.debug(f"Wrote {len(image)} bytes to {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        """Write the listing file."""
        self._codegen.write_listing(filepath)
        logger.debug(f"Wrote listing to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> bytes:
    """Assemble source text into a 256-byte image."""
    return Assembler().assemble(source, filename)


def assemble_file(filepath: str | Path) -> bytes:
    """Assemble a source file into a 256-byte image."""
    return Assembler().assemble_file(filepath)
