"""Host session: frame hand-off, pause and fault handling, reloads."""

import pytest

from chip8vm import Chip8CPU
from chip8vm.session import EmulationSession

from conftest import assemble


@pytest.fixture
def session():
    return EmulationSession(Chip8CPU(seed=1234))


@pytest.fixture
def rom(tmp_path):
    path = tmp_path / "loop.ch8"
    # 00E0, then draw glyph 0 at (0, 0) forever
    path.write_bytes(assemble(0x00E0, 0x6000, 0xF029, 0xD005, 0x1206))
    return path


class TestFrames:

    def test_clean_screen_gives_no_frame(self, session):
        assert session.take_frame() is None

    def test_draw_after_take_is_still_reported(self, session, rom):
        assert session.load(str(rom))
        session.run_frame(1)
        assert session.take_frame() is not None
        assert session.take_frame() is None
        session.run_frame(3)
        frame = session.take_frame()
        assert frame is not None
        assert frame[0] == 1


class TestRunning:

    def test_nothing_runs_before_a_rom(self, session):
        assert not session.runnable
        assert session.run_frame(10) == 0
        assert session.cpu.cycles == 0
        assert session.fault is None

    def test_runs_requested_cycles(self, session, rom):
        session.load(str(rom))
        assert session.run_frame(8) == 8
        assert session.cpu.cycles == 8

    def test_pause_blocks_cycling(self, session, rom):
        session.load(str(rom))
        session.paused = True
        assert session.run_frame(8) == 0
        session.paused = False
        assert session.run_frame(8) == 8

    def test_fault_stops_frame_and_is_kept(self, session):
        session.cpu.load_rom(assemble(0x6001, 0x00EE, 0x6102))
        assert session.run_frame(10) == 1
        assert "stack underflow" in session.fault
        assert session.run_frame(10) == 0
        assert session.cpu.v[1] == 0


class TestLoading:

    def test_failed_load_records_error(self, session, tmp_path):
        assert not session.load(str(tmp_path / "missing.ch8"))
        assert "missing.ch8" in session.fault
        assert session.rom_path is None

    def test_failed_reload_leaves_machine_idle(self, session, rom):
        session.load(str(rom))
        session.run_frame(4)
        rom.unlink()
        assert not session.reload()
        assert "loop.ch8" in session.fault
        assert not session.cpu.rom_loaded
        assert session.run_frame(10) == 0
        assert session.cpu.cycles == 0

    def test_successful_load_clears_fault(self, session, rom, tmp_path):
        session.load(str(tmp_path / "missing.ch8"))
        assert session.load(str(rom))
        assert session.fault is None
        assert session.runnable

    def test_reload_without_rom(self, session):
        assert not session.reload()
