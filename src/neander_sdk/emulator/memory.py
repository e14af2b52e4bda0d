"""
Neander Memory
==============

The whole machine memory: 256 byte cells, addresses 0x00-0xFF. Cells carry
no type; whether a byte is an opcode, an operand or data depends only on
where the program counter goes.

Addresses wrap modulo 256 and written values are masked to 8 bits.
"""

from typing import Iterator

from neander_sdk.assembler.opcodes import MEMORY_SIZE


class Memory:
    """
    256-byte memory image.

    load() copies its argument, so the caller's buffer is never aliased by a
    running program.

    Example:
        >>> mem = Memory()
        >>> mem.load(bytes([0x20, 0x80, 0xF0]))
        >>> mem.read(0x01)
        128
    """

    SIZE = MEMORY_SIZE

    def __init__(self, image: bytes | bytearray | None = None):
        self._data = bytearray(self.SIZE)
        if image is not None:
            self.load(image)

    def load(self, image: bytes | bytearray) -> None:
        """
        Replace the memory contents with a copy of image.

        Images shorter than 256 bytes are padded with zeros (NOP).

        Raises:
            ValueError: If image is longer than 256 bytes
        """
        if len(image) > self.SIZE:
            raise ValueError(
                f"image is {len(image)} bytes, memory holds {self.SIZE}"
            )
        self._data = bytearray(self.SIZE)
        self._data[:len(image)] = image

    def read(self, address: int) -> int:
        return self._data[address % self.SIZE]

    def write(self, address: int, value: int) -> None:
        self._data[address % self.SIZE] = value & 0xFF

    def dump(self, start: int = 0x80, end: int = 0x90) -> list[tuple[int, int]]:
        """Return (address, value) pairs for start <= address < end."""
        start = max(start, 0)
        end = min(end, self.SIZE)
        return [(address, self._data[address]) for address in range(start, end)]

    def snapshot(self) -> bytes:
        """Return an immutable copy of the whole memory."""
        return bytes(self._data)

    def __getitem__(self, address: int) -> int:
        return self.read(address)

    def __len__(self) -> int:
        return self.SIZE

    def __iter__(self) -> Iterator[int]:
        return iter(self._data)
