"""Fixed-capacity return address stack."""

from .constants import STACK_SIZE
from .errors import StackOverflow, StackUnderflow


class CallStack:
    """16 return addresses and an explicit stack pointer, 0 <= sp <= 16"""

    def __init__(self):
        self.reset()

    def reset(self):
        self.slots = [0] * STACK_SIZE
        self.sp = 0

    def __len__(self) -> int:
        return self.sp

    @property
    def full(self) -> bool:
        return self.sp >= STACK_SIZE

    @property
    def empty(self) -> bool:
        return self.sp == 0

    def push(self, address: int):
        if self.full:
            raise StackOverflow(address, self.sp)
        self.slots[self.sp] = address
        self.sp += 1

    def pop(self) -> int:
        if self.empty:
            raise StackUnderflow()
        self.sp -= 1
        return self.slots[self.sp]

    def peek(self) -> int:
        if self.empty:
            raise StackUnderflow()
        return self.slots[self.sp - 1]

    def frames(self) -> list:
        """Outstanding return addresses, oldest first"""
        return self.slots[:self.sp]
