"""
Emulation session shared by the host's UI and emulation threads.

The emulation thread calls ``run_frame()``, the UI thread calls
``take_frame()`` and ``load()``; all machine access goes through one
lock. Nothing here touches Tk.
"""

import logging
import threading
from typing import Optional

from .cpu import Chip8CPU
from .errors import LoadError

logger = logging.getLogger(__name__)


class EmulationSession:
    """Owns the machine plus the host's pause/fault state"""

    def __init__(self, cpu: Optional[Chip8CPU] = None):
        self.cpu = cpu or Chip8CPU()
        self.lock = threading.Lock()
        self.paused = False
        self.fault: Optional[str] = None
        self.rom_path: Optional[str] = None

    @property
    def runnable(self) -> bool:
        return self.cpu.rom_loaded and not self.paused and self.fault is None

    def load(self, path: str) -> bool:
        """Load a ROM; on failure the machine stays idle with the error as fault"""
        with self.lock:
            try:
                self.cpu.load_rom_file(path)
            except LoadError as e:
                logger.error("%s", e)
                self.fault = str(e)
                return False
            self.rom_path = path
            self.fault = None
        return True

    def reload(self) -> bool:
        if self.rom_path is None:
            return False
        return self.load(self.rom_path)

    def run_frame(self, cycles: int) -> int:
        """Run up to ``cycles`` instructions; returns how many completed"""
        done = 0
        with self.lock:
            if not self.runnable:
                return 0
            for _ in range(cycles):
                result = self.cpu.cycle()
                if not result.ok:
                    # Leave the machine as it is and let the user decide
                    self.fault = str(result.error)
                    break
                done += 1
        return done

    def take_frame(self) -> Optional[bytes]:
        """Copy of the screen if it changed since the last call, else None"""
        with self.lock:
            if not self.cpu.display.dirty:
                return None
            return self.cpu.display.present()
