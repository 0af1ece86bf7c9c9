"""Fixed machine geometry and the built-in hex glyph table."""

# Memory
MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START  # 3584 bytes
FONT_START = 0x000
FONT_GLYPH_SIZE = 5

# Display
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
SPRITE_WIDTH = 8

# CPU
NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
STACK_SIZE = 16
NUM_KEYS = 16

# Timing
TIMER_FREQUENCY = 60
TIMER_INTERVAL = 1.0 / TIMER_FREQUENCY

# CHIP-8 Font sprites (0-F)
FONTSET = (
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
)

FONT_END = FONT_START + len(FONTSET)  # first address past the glyph table
