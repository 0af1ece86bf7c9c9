"""
Hex keypad state.

Written by the host's input thread, read by the interpreter thread, so
every access goes through a short-held lock.

Logical layout (COSMAC VIP):
    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F
"""

import logging
import threading
from typing import Optional

from .constants import NUM_KEYS

logger = logging.getLogger(__name__)


class Keypad:
    """16 boolean key states indexed by logical key 0x0-0xF"""

    def __init__(self):
        self._lock = threading.Lock()
        self._keys = [False] * NUM_KEYS

    def reset(self):
        with self._lock:
            self._keys = [False] * NUM_KEYS

    def _valid(self, key: int) -> bool:
        if 0 <= key < NUM_KEYS:
            return True
        logger.warning("ignoring out-of-range key code %r", key)
        return False

    def key_down(self, key: int):
        if self._valid(key):
            with self._lock:
                self._keys[key] = True

    def key_up(self, key: int):
        if self._valid(key):
            with self._lock:
                self._keys[key] = False

    def set_key(self, key: int, pressed: bool):
        if pressed:
            self.key_down(key)
        else:
            self.key_up(key)

    def is_pressed(self, key: int) -> bool:
        with self._lock:
            return self._keys[key & 0xF]

    def highest_pressed(self) -> Optional[int]:
        """Scan all keys; a later (higher) match replaces an earlier one"""
        found = None
        with self._lock:
            for key in range(NUM_KEYS):
                if self._keys[key]:
                    found = key
        return found

    def snapshot(self) -> tuple:
        with self._lock:
            return tuple(self._keys)
