"""Faults raised by the CHIP-8 core.

Every fault is recoverable: the cycle driver catches ``Chip8Error``,
logs it and hands it back to the host inside a ``CycleResult``.
"""

from typing import Optional


class Chip8Error(Exception):
    """Base class for all interpreter faults"""


class StackOverflow(Chip8Error):
    """Raised when a call is made with all stack slots in use"""

    def __init__(self, address: int, depth: int):
        self.address = address
        self.depth = depth
        super().__init__(
            f"stack overflow pushing 0x{address:03X} (depth {depth})")


class StackUnderflow(Chip8Error):
    """Raised on a return with no outstanding call"""

    def __init__(self):
        super().__init__("stack underflow: return with empty stack")


class UnknownOpcode(Chip8Error):
    """Raised when an instruction word matches no defined operation"""

    def __init__(self, opcode: int, pc: Optional[int] = None):
        self.opcode = opcode
        self.pc = pc
        where = f" at 0x{pc:03X}" if pc is not None else ""
        super().__init__(f"unknown opcode 0x{opcode:04X}{where}")


class AddressOutOfRange(Chip8Error):
    """Raised for a memory access outside the writable/readable space"""

    def __init__(self, address: int, reason: str = "outside 0x000-0xFFF"):
        self.address = address
        super().__init__(f"address 0x{address:X} {reason}")


class LoadError(Chip8Error):
    """Raised when a program image cannot be read"""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"failed to load ROM {path!r}: {reason}")
