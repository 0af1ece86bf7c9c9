"""
CHIP-8 interpreter core.

``Chip8CPU`` owns the whole machine (memory, registers, stack, timers,
framebuffer, keypad) and is driven one instruction at a time by the
host through ``cycle()``. Nothing is shared between instances.

Each cycle:
  1. fetch the word at PC, decode it and execute it; or, while the
     machine is waiting on FX0A, re-poll the keypad instead
  2. feed the elapsed wall time to the 60Hz timers

Faults never escape ``cycle()``: they are logged and returned in the
``CycleResult`` with the machine left as it was before the failing
instruction. What to do next (halt, skip, reset) is up to the host.
"""

import logging
import os
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Callable

from .constants import PROGRAM_START, FONT_START, FONT_GLYPH_SIZE
from .decoder import Op, Instruction, decode
from .display import Framebuffer
from .errors import Chip8Error, UnknownOpcode, LoadError
from .keypad import Keypad
from .memory import Memory
from .registers import RegisterFile
from .stack import CallStack
from .timers import Timers

logger = logging.getLogger(__name__)


class MachineState(Enum):
    RUNNING = "running"
    AWAITING_KEY = "awaiting key"


@dataclass
class CycleResult:
    """What one driver invocation did"""
    state: MachineState
    instruction: Optional[Instruction] = None
    timer_fired: bool = False
    error: Optional[Chip8Error] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# Handler method for every operation; a missing entry is a bug.
_HANDLERS = {
    Op.CLS: "_op_cls",
    Op.RET: "_op_ret",
    Op.JP: "_op_jp",
    Op.CALL: "_op_call",
    Op.SE_BYTE: "_op_se_byte",
    Op.SNE_BYTE: "_op_sne_byte",
    Op.SE_REG: "_op_se_reg",
    Op.LD_BYTE: "_op_ld_byte",
    Op.ADD_BYTE: "_op_add_byte",
    Op.LD_REG: "_op_ld_reg",
    Op.OR: "_op_or",
    Op.AND: "_op_and",
    Op.XOR: "_op_xor",
    Op.ADD_REG: "_op_add_reg",
    Op.SUB: "_op_sub",
    Op.SHR: "_op_shr",
    Op.SUBN: "_op_subn",
    Op.SHL: "_op_shl",
    Op.SNE_REG: "_op_sne_reg",
    Op.LD_I: "_op_ld_i",
    Op.JP_V0: "_op_jp_v0",
    Op.RND: "_op_rnd",
    Op.DRW: "_op_drw",
    Op.SKP: "_op_skp",
    Op.SKNP: "_op_sknp",
    Op.LD_VX_DT: "_op_ld_vx_dt",
    Op.LD_VX_K: "_op_ld_vx_k",
    Op.LD_DT_VX: "_op_ld_dt_vx",
    Op.LD_ST_VX: "_op_ld_st_vx",
    Op.ADD_I_VX: "_op_add_i_vx",
    Op.LD_F_VX: "_op_ld_f_vx",
    Op.LD_B_VX: "_op_ld_b_vx",
    Op.STORE: "_op_store",
    Op.LOAD: "_op_load",
}


class Chip8CPU:
    """CHIP-8 machine: state, opcode handlers and the cycle driver"""

    def __init__(self, on_tone: Optional[Callable[[], None]] = None,
                 seed: Optional[int] = None,
                 clock: Callable[[], float] = time.perf_counter):
        self.seed = seed
        self.clock = clock

        self.memory = Memory()
        self.regs = RegisterFile()
        self.stack = CallStack()
        self.timers = Timers(on_tone)
        self.display = Framebuffer()
        self.keypad = Keypad()
        self.rng = random.Random()

        self._dispatch = {op: getattr(self, name)
                          for op, name in _HANDLERS.items()}
        self.reset()

    def reset(self):
        """Reset CPU to initial power-on state"""
        logger.info("reset")
        self.memory.reset()
        self.regs.reset()
        self.stack.reset()
        self.timers.reset()
        self.display.reset()
        self.keypad.reset()
        self.rng.seed(self.seed)

        self.state = MachineState.RUNNING
        self.key_register = 0  # Register to store key for FX0A
        self._last_time = None

        # ROM info
        self.rom_loaded = False
        self.rom_name = ""
        self.rom_size = 0

        self.cycles = 0

    # ==================== REGISTER SHORTCUTS ====================

    @property
    def v(self) -> list:
        return self.regs.v

    @property
    def pc(self) -> int:
        return self.regs.pc

    @pc.setter
    def pc(self, value: int):
        self.regs.jump(value)

    @property
    def i(self) -> int:
        return self.regs.i

    @i.setter
    def i(self, value: int):
        self.regs.set_index(value)

    @property
    def delay_timer(self) -> int:
        return self.timers.delay

    @property
    def sound_timer(self) -> int:
        return self.timers.sound

    # ==================== LOADING ====================

    def load_rom(self, data: bytes, name: str = "") -> int:
        """Reset, then copy a program image to 0x200.

        Images longer than 3584 bytes are truncated. Returns the number
        of bytes copied.
        """
        self.reset()
        self.rom_size = self.memory.load_image(data)
        self.rom_loaded = True
        self.rom_name = name or "Unknown"
        logger.info("loaded ROM %r (%d bytes at 0x%03X)",
                    self.rom_name, self.rom_size, PROGRAM_START)
        return self.rom_size

    def load_rom_file(self, path: str) -> int:
        """Load a ROM from disk, raising LoadError if it cannot be read.

        On failure the machine is left freshly reset with no ROM.
        """
        self.reset()
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise LoadError(path, e.strerror or str(e)) from e
        return self.load_rom(data, os.path.basename(path))

    # ==================== INPUT ====================

    def key_down(self, key: int):
        self.keypad.key_down(key)

    def key_up(self, key: int):
        self.keypad.key_up(key)

    # ==================== CYCLE DRIVER ====================

    def cycle(self, elapsed: Optional[float] = None) -> CycleResult:
        """
        Execute one instruction (or one key poll), then tick the timers.

        ``elapsed`` is the wall time in seconds since the previous call;
        when omitted it is measured with ``self.clock``.
        """
        if elapsed is None:
            now = self.clock()
            elapsed = 0.0 if self._last_time is None else now - self._last_time
            self._last_time = now

        instruction = None
        error = None
        try:
            if self.state is MachineState.AWAITING_KEY:
                self._resolve_key(self.key_register)
            else:
                instruction = self.fetch()
                self.execute(instruction)
            self.cycles += 1
        except Chip8Error as e:
            logger.warning("fault at PC 0x%03X: %s", self.regs.pc, e)
            error = e

        fired = self.timers.tick(elapsed)
        return CycleResult(self.state, instruction, fired, error)

    def run(self, max_cycles: int, elapsed: float = 0.0) -> CycleResult:
        """Cycle until a fault or ``max_cycles``; returns the last result"""
        result = None
        for _ in range(max_cycles):
            result = self.cycle(elapsed)
            if not result.ok:
                break
        return result

    def fetch(self) -> Instruction:
        pc = self.regs.pc
        word = self.memory.read_word(pc)
        try:
            return decode(word)
        except UnknownOpcode:
            raise UnknownOpcode(word, pc) from None

    def execute(self, instruction: Instruction):
        self._dispatch[instruction.op](instruction)

    def dump_state(self) -> dict:
        """Register snapshot for debug overlays"""
        return {
            "pc": self.regs.pc,
            "i": self.regs.i,
            "sp": self.stack.sp,
            "v": list(self.regs.v),
            "delay": self.timers.delay,
            "sound": self.timers.sound,
            "state": self.state.value,
            "cycles": self.cycles,
        }

    # ==================== FLOW CONTROL ====================

    def _op_cls(self, ins: Instruction):
        self.display.clear()
        self.regs.advance()

    def _op_ret(self, ins: Instruction):
        self.regs.jump(self.stack.pop())

    def _op_jp(self, ins: Instruction):
        self.regs.jump(ins.nnn)

    def _op_call(self, ins: Instruction):
        self.stack.push(self.regs.pc + 2)
        self.regs.jump(ins.nnn)

    def _op_jp_v0(self, ins: Instruction):
        self.regs.jump(ins.nnn + self.regs[0])

    # ==================== CONDITIONAL SKIPS ====================

    def _op_se_byte(self, ins: Instruction):
        self.regs.advance(skip=self.regs[ins.x] == ins.nn)

    def _op_sne_byte(self, ins: Instruction):
        self.regs.advance(skip=self.regs[ins.x] != ins.nn)

    def _op_se_reg(self, ins: Instruction):
        self.regs.advance(skip=self.regs[ins.x] == self.regs[ins.y])

    def _op_sne_reg(self, ins: Instruction):
        self.regs.advance(skip=self.regs[ins.x] != self.regs[ins.y])

    def _op_skp(self, ins: Instruction):
        self.regs.advance(skip=self.keypad.is_pressed(self.regs[ins.x]))

    def _op_sknp(self, ins: Instruction):
        self.regs.advance(skip=not self.keypad.is_pressed(self.regs[ins.x]))

    # ==================== REGISTER OPERATIONS ====================

    def _op_ld_byte(self, ins: Instruction):
        self.regs[ins.x] = ins.nn
        self.regs.advance()

    def _op_add_byte(self, ins: Instruction):
        # No carry
        self.regs[ins.x] = self.regs[ins.x] + ins.nn
        self.regs.advance()

    def _op_ld_reg(self, ins: Instruction):
        self.regs[ins.x] = self.regs[ins.y]
        self.regs.advance()

    def _op_or(self, ins: Instruction):
        self.regs[ins.x] = self.regs[ins.x] | self.regs[ins.y]
        self.regs.advance()

    def _op_and(self, ins: Instruction):
        self.regs[ins.x] = self.regs[ins.x] & self.regs[ins.y]
        self.regs.advance()

    def _op_xor(self, ins: Instruction):
        self.regs[ins.x] = self.regs[ins.x] ^ self.regs[ins.y]
        self.regs.advance()

    # The flag is written before Vx, so with X=F the result wins.

    def _op_add_reg(self, ins: Instruction):
        total = self.regs[ins.x] + self.regs[ins.y]
        self.regs.flag = 1 if total > 0xFF else 0
        self.regs[ins.x] = total
        self.regs.advance()

    def _op_sub(self, ins: Instruction):
        vx, vy = self.regs[ins.x], self.regs[ins.y]
        self.regs.flag = 1 if vx >= vy else 0
        self.regs[ins.x] = vx - vy
        self.regs.advance()

    def _op_subn(self, ins: Instruction):
        vx, vy = self.regs[ins.x], self.regs[ins.y]
        self.regs.flag = 1 if vy >= vx else 0
        self.regs[ins.x] = vy - vx
        self.regs.advance()

    def _op_shr(self, ins: Instruction):
        # Shifts operate on Vx; Vy is ignored
        vx = self.regs[ins.x]
        self.regs.flag = vx & 0x1
        self.regs[ins.x] = vx >> 1
        self.regs.advance()

    def _op_shl(self, ins: Instruction):
        vx = self.regs[ins.x]
        self.regs.flag = vx >> 7
        self.regs[ins.x] = vx << 1
        self.regs.advance()

    def _op_rnd(self, ins: Instruction):
        self.regs[ins.x] = self.rng.randint(0, 255) & ins.nn
        self.regs.advance()

    # ==================== INDEX AND MEMORY ====================

    def _op_ld_i(self, ins: Instruction):
        self.regs.set_index(ins.nnn)
        self.regs.advance()

    def _op_add_i_vx(self, ins: Instruction):
        self.regs.set_index(self.regs.i + self.regs[ins.x])
        self.regs.advance()

    def _op_ld_f_vx(self, ins: Instruction):
        self.regs.set_index(FONT_START + self.regs[ins.x] * FONT_GLYPH_SIZE)
        self.regs.advance()

    def _op_ld_b_vx(self, ins: Instruction):
        value = self.regs[ins.x]
        digits = bytes((value // 100, (value // 10) % 10, value % 10))
        self.memory.write_block(self.regs.i, digits)
        self.regs.advance()

    def _op_store(self, ins: Instruction):
        self.memory.write_block(self.regs.i, bytes(self.regs.v[:ins.x + 1]))
        self.regs.advance()

    def _op_load(self, ins: Instruction):
        data = self.memory.read_block(self.regs.i, ins.x + 1)
        for r, byte in enumerate(data):
            self.regs[r] = byte
        self.regs.advance()

    # ==================== DISPLAY ====================

    def _op_drw(self, ins: Instruction):
        # Sprite rows are validated before VF or the screen change
        rows = self.memory.read_block(self.regs.i, ins.n)
        x, y = self.regs[ins.x], self.regs[ins.y]
        self.regs.flag = 0
        if self.display.draw(x, y, rows):
            self.regs.flag = 1
        self.regs.advance()

    # ==================== TIMERS AND INPUT ====================

    def _op_ld_vx_dt(self, ins: Instruction):
        self.regs[ins.x] = self.timers.delay
        self.regs.advance()

    def _op_ld_dt_vx(self, ins: Instruction):
        self.timers.delay = self.regs[ins.x]
        self.regs.advance()

    def _op_ld_st_vx(self, ins: Instruction):
        self.timers.sound = self.regs[ins.x]
        self.regs.advance()

    def _op_ld_vx_k(self, ins: Instruction):
        if not self._resolve_key(ins.x):
            self.state = MachineState.AWAITING_KEY
            self.key_register = ins.x
            logger.debug("waiting for key into V%X", ins.x)

    def _resolve_key(self, register: int) -> bool:
        """Store the highest pressed key and step past FX0A, if any key is down"""
        key = self.keypad.highest_pressed()
        if key is None:
            return False
        self.regs[register] = key
        self.regs.advance()
        if self.state is MachineState.AWAITING_KEY:
            logger.debug("key 0x%X resolved wait", key)
        self.state = MachineState.RUNNING
        return True
