"""CHIP-8 virtual machine: a self-contained interpreter core plus a Tk host."""

from .cpu import Chip8CPU, CycleResult, MachineState
from .decoder import Op, Instruction, decode, disassemble
from .errors import (Chip8Error, StackOverflow, StackUnderflow, UnknownOpcode,
                     AddressOutOfRange, LoadError)

__all__ = [
    "Chip8CPU", "CycleResult", "MachineState",
    "Op", "Instruction", "decode", "disassemble",
    "Chip8Error", "StackOverflow", "StackUnderflow", "UnknownOpcode",
    "AddressOutOfRange", "LoadError",
]
