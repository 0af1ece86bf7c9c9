"""Register file: V0-VF, the index register I and the program counter."""

from .constants import NUM_REGISTERS, FLAG_REGISTER, PROGRAM_START


class RegisterFile:
    """16 byte registers plus 16-bit I and PC.

    VF doubles as the flag register for carry, borrow, shift-out and
    sprite collision. Register ids come from a 4-bit field, so ``v``
    indexing needs no bounds check.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        self.v = [0] * NUM_REGISTERS  # V0-VF
        self.i = 0  # Index register
        self.pc = PROGRAM_START  # Program counter

    def __getitem__(self, index: int) -> int:
        return self.v[index]

    def __setitem__(self, index: int, value: int):
        self.v[index] = value & 0xFF

    @property
    def flag(self) -> int:
        return self.v[FLAG_REGISTER]

    @flag.setter
    def flag(self, value: int):
        self.v[FLAG_REGISTER] = value & 0xFF

    def set_index(self, value: int):
        self.i = value & 0xFFFF

    def jump(self, address: int):
        self.pc = address & 0xFFFF

    def advance(self, skip: bool = False):
        """Step past the current instruction, and the next one if ``skip``"""
        self.pc = (self.pc + (4 if skip else 2)) & 0xFFFF
