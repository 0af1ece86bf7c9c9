"""
Instruction decoder.

Every instruction is one big-endian 16-bit word:
  - NNN   12-bit address
  - NN    8-bit constant
  - N     4-bit constant
  - X, Y  4-bit register identifiers

The top nibble picks an instruction family. Families 0x0, 0x8, 0xE and
0xF need a second selector (the whole word, N or NN) to name a single
operation; every other family is fully determined by its top nibble.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Tuple

from .errors import UnknownOpcode


class Op(Enum):
    """Every operation the interpreter understands"""
    CLS = auto()        # 00E0
    RET = auto()        # 00EE
    JP = auto()         # 1NNN
    CALL = auto()       # 2NNN
    SE_BYTE = auto()    # 3XNN
    SNE_BYTE = auto()   # 4XNN
    SE_REG = auto()     # 5XY0
    LD_BYTE = auto()    # 6XNN
    ADD_BYTE = auto()   # 7XNN
    LD_REG = auto()     # 8XY0
    OR = auto()         # 8XY1
    AND = auto()        # 8XY2
    XOR = auto()        # 8XY3
    ADD_REG = auto()    # 8XY4
    SUB = auto()        # 8XY5
    SHR = auto()        # 8XY6
    SUBN = auto()       # 8XY7
    SHL = auto()        # 8XYE
    SNE_REG = auto()    # 9XY0
    LD_I = auto()       # ANNN
    JP_V0 = auto()      # BNNN
    RND = auto()        # CXNN
    DRW = auto()        # DXYN
    SKP = auto()        # EX9E
    SKNP = auto()       # EXA1
    LD_VX_DT = auto()   # FX07
    LD_VX_K = auto()    # FX0A
    LD_DT_VX = auto()   # FX15
    LD_ST_VX = auto()   # FX18
    ADD_I_VX = auto()   # FX1E
    LD_F_VX = auto()    # FX29
    LD_B_VX = auto()    # FX33
    STORE = auto()      # FX55
    LOAD = auto()       # FX65


MNEMONICS = {
    Op.CLS: "CLS",
    Op.RET: "RET",
    Op.JP: "JP {nnn:#05x}",
    Op.CALL: "CALL {nnn:#05x}",
    Op.SE_BYTE: "SE V{x:X}, {nn:#04x}",
    Op.SNE_BYTE: "SNE V{x:X}, {nn:#04x}",
    Op.SE_REG: "SE V{x:X}, V{y:X}",
    Op.LD_BYTE: "LD V{x:X}, {nn:#04x}",
    Op.ADD_BYTE: "ADD V{x:X}, {nn:#04x}",
    Op.LD_REG: "LD V{x:X}, V{y:X}",
    Op.OR: "OR V{x:X}, V{y:X}",
    Op.AND: "AND V{x:X}, V{y:X}",
    Op.XOR: "XOR V{x:X}, V{y:X}",
    Op.ADD_REG: "ADD V{x:X}, V{y:X}",
    Op.SUB: "SUB V{x:X}, V{y:X}",
    Op.SHR: "SHR V{x:X}",
    Op.SUBN: "SUBN V{x:X}, V{y:X}",
    Op.SHL: "SHL V{x:X}",
    Op.SNE_REG: "SNE V{x:X}, V{y:X}",
    Op.LD_I: "LD I, {nnn:#05x}",
    Op.JP_V0: "JP V0, {nnn:#05x}",
    Op.RND: "RND V{x:X}, {nn:#04x}",
    Op.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Op.SKP: "SKP V{x:X}",
    Op.SKNP: "SKNP V{x:X}",
    Op.LD_VX_DT: "LD V{x:X}, DT",
    Op.LD_VX_K: "LD V{x:X}, K",
    Op.LD_DT_VX: "LD DT, V{x:X}",
    Op.LD_ST_VX: "LD ST, V{x:X}",
    Op.ADD_I_VX: "ADD I, V{x:X}",
    Op.LD_F_VX: "LD F, V{x:X}",
    Op.LD_B_VX: "LD B, V{x:X}",
    Op.STORE: "LD [I], V{x:X}",
    Op.LOAD: "LD V{x:X}, [I]",
}


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction word and its operand fields"""
    op: Op
    word: int

    @property
    def x(self) -> int:
        return (self.word >> 8) & 0x0F  # Register X

    @property
    def y(self) -> int:
        return (self.word >> 4) & 0x0F  # Register Y

    @property
    def n(self) -> int:
        return self.word & 0x000F  # 4-bit constant

    @property
    def nn(self) -> int:
        return self.word & 0x00FF  # 8-bit constant

    @property
    def nnn(self) -> int:
        return self.word & 0x0FFF  # 12-bit address

    def __str__(self):
        return MNEMONICS[self.op].format(
            x=self.x, y=self.y, n=self.n, nn=self.nn, nnn=self.nnn)


# Secondary selectors
_SYS_OPS = {0x00E0: Op.CLS, 0x00EE: Op.RET}  # whole word

_ALU_OPS = {  # N
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_KEY_OPS = {0x9E: Op.SKP, 0xA1: Op.SKNP}  # NN

_MISC_OPS = {  # NN
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX,
    0x29: Op.LD_F_VX,
    0x33: Op.LD_B_VX,
    0x55: Op.STORE,
    0x65: Op.LOAD,
}

# Primary selector: family -> (fixed op) or (table, selector mask)
_FAMILIES = {
    0x0: (_SYS_OPS, 0xFFFF),
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_BYTE,
    0x4: Op.SNE_BYTE,
    0x5: Op.SE_REG,
    0x6: Op.LD_BYTE,
    0x7: Op.ADD_BYTE,
    0x8: (_ALU_OPS, 0x000F),
    0x9: Op.SNE_REG,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
    0xE: (_KEY_OPS, 0x00FF),
    0xF: (_MISC_OPS, 0x00FF),
}


def decode(word: int) -> Instruction:
    """Decode a 16-bit word, raising UnknownOpcode if it names nothing"""
    word &= 0xFFFF
    family = _FAMILIES[word >> 12]

    if isinstance(family, Op):
        return Instruction(family, word)

    table, mask = family
    op = table.get(word & mask)
    if op is None:
        raise UnknownOpcode(word)
    return Instruction(op, word)


def disassemble(data: bytes, origin: int = 0x200
                ) -> Iterator[Tuple[int, int, str]]:
    """Yield ``(address, word, text)`` for each word in ``data``.

    A trailing odd byte is ignored. Words that decode to nothing are
    rendered as data.
    """
    for offset in range(0, len(data) - 1, 2):
        word = (data[offset] << 8) | data[offset + 1]
        try:
            text = str(decode(word))
        except UnknownOpcode:
            text = f"DW {word:#06x}"
        yield origin + offset, word, text
