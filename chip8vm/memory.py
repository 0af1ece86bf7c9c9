"""
CHIP-8 memory map

  0x000 - 0x04F   built-in 4x5 hex glyph table (read-only to programs)
  0x050 - 0x1FF   reserved
  0x200 - 0xFFF   program image and work RAM

All accesses are bounds checked; nothing wraps around silently.
"""

import logging

from .constants import (MEMORY_SIZE, PROGRAM_START, MAX_ROM_SIZE,
                        FONT_START, FONT_END, FONTSET)
from .errors import AddressOutOfRange

logger = logging.getLogger(__name__)


class Memory:
    """4KB flat byte store with the glyph table installed at reset"""

    def __init__(self):
        self._mem = bytearray(MEMORY_SIZE)
        self.reset()

    def reset(self):
        """Zero everything and reinstall the glyph table"""
        self._mem[:] = bytes(MEMORY_SIZE)
        self._mem[FONT_START:FONT_END] = bytes(FONTSET)

    def check_range(self, address: int, length: int = 1):
        """Raise unless ``address .. address+length-1`` lies in memory"""
        if address < 0 or address + length > MEMORY_SIZE:
            raise AddressOutOfRange(max(address, address + length - 1))

    def check_writable(self, address: int, length: int = 1):
        self.check_range(address, length)
        if length > 0 and address < FONT_END:
            raise AddressOutOfRange(address, "is inside the glyph table")

    def read(self, address: int) -> int:
        self.check_range(address)
        return self._mem[address]

    def read_block(self, address: int, length: int) -> bytes:
        self.check_range(address, length)
        return bytes(self._mem[address:address + length])

    def read_word(self, address: int) -> int:
        """Big-endian 16-bit read of ``address`` and ``address+1``"""
        self.check_range(address, 2)
        return (self._mem[address] << 8) | self._mem[address + 1]

    def write(self, address: int, value: int):
        self.check_writable(address)
        self._mem[address] = value & 0xFF

    def write_block(self, address: int, data: bytes):
        self.check_writable(address, len(data))
        self._mem[address:address + len(data)] = data

    def load_image(self, data: bytes) -> int:
        """Copy a program image to 0x200, truncating at 3584 bytes.

        Returns the number of bytes copied.
        """
        image = bytes(data[:MAX_ROM_SIZE])
        if len(data) > MAX_ROM_SIZE:
            logger.warning("ROM is %d bytes, truncated to %d",
                           len(data), MAX_ROM_SIZE)
        self._mem[PROGRAM_START:PROGRAM_START + len(image)] = image
        return len(image)

    def snapshot(self) -> bytes:
        """Immutable copy of the whole address space"""
        return bytes(self._mem)
