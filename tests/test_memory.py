"""Memory map, bounds checks and image loading."""

import pytest

from chip8vm.constants import FONTSET, MAX_ROM_SIZE, PROGRAM_START
from chip8vm.errors import AddressOutOfRange
from chip8vm.memory import Memory


class TestLayout:

    def test_glyph_table_installed_at_zero(self):
        mem = Memory()
        assert mem.read_block(0x000, 80) == bytes(FONTSET)
        assert mem.read(0x050) == 0

    def test_reset_restores_glyphs_and_clears_work_area(self):
        mem = Memory()
        mem.write(0x300, 0xAB)
        mem.reset()
        assert mem.read(0x300) == 0
        assert mem.read(0x000) == 0xF0

    def test_glyph_table_rejects_writes(self):
        mem = Memory()
        with pytest.raises(AddressOutOfRange):
            mem.write(0x04F, 0)
        with pytest.raises(AddressOutOfRange):
            mem.write_block(0x04E, b"\x01\x02\x03")
        assert mem.read(0x04F) == FONTSET[-1]
        mem.write(0x050, 0x12)
        assert mem.read(0x050) == 0x12


class TestBounds:

    def test_last_byte_is_addressable(self):
        mem = Memory()
        mem.write(0xFFF, 0x7F)
        assert mem.read(0xFFF) == 0x7F

    def test_read_past_end(self):
        mem = Memory()
        with pytest.raises(AddressOutOfRange) as info:
            mem.read(0x1000)
        assert info.value.address == 0x1000

    def test_block_crossing_end(self):
        mem = Memory()
        with pytest.raises(AddressOutOfRange):
            mem.read_block(0xFFE, 3)
        with pytest.raises(AddressOutOfRange):
            mem.write_block(0xFFF, b"\x00\x00")

    def test_failed_block_write_changes_nothing(self):
        mem = Memory()
        before = mem.snapshot()
        with pytest.raises(AddressOutOfRange):
            mem.write_block(0xFFD, b"\x01\x02\x03\x04")
        assert mem.snapshot() == before

    def test_read_word_big_endian(self):
        mem = Memory()
        mem.write_block(0xFFE, b"\x12\x34")
        assert mem.read_word(0xFFE) == 0x1234
        with pytest.raises(AddressOutOfRange):
            mem.read_word(0xFFF)


class TestLoadImage:

    def test_small_image(self):
        mem = Memory()
        assert mem.load_image(b"\xA2\x2A") == 2
        assert mem.read_word(PROGRAM_START) == 0xA22A

    def test_oversized_image_is_truncated(self):
        mem = Memory()
        data = bytes(i % 251 for i in range(4000))
        assert mem.load_image(data) == MAX_ROM_SIZE
        snap = mem.snapshot()
        assert len(snap) == 4096
        assert snap[0x200:0xE00 + 0x200] == data[:MAX_ROM_SIZE]
        assert snap[:0x50] == bytes(FONTSET)
