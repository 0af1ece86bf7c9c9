"""Host keyboard to logical keypad mapping."""

from typing import Optional

# Keyboard mapping (host key -> CHIP-8 key), COSMAC VIP layout
KEYBOARD_MAP = {
    '1': 0x1, '2': 0x2, '3': 0x3, '4': 0xC,
    'q': 0x4, 'w': 0x5, 'e': 0x6, 'r': 0xD,
    'a': 0x7, 's': 0x8, 'd': 0x9, 'f': 0xE,
    'z': 0xA, 'x': 0x0, 'c': 0xB, 'v': 0xF,
}

# Alternative hex layout: the digit/letter names the key directly
HEX_KEYBOARD_MAP = {f"{k:x}": k for k in range(16)}


def translate_key(keysym: str, layout: str = "cosmac") -> Optional[int]:
    """Map a host key name to a logical key, or None if unmapped"""
    key = keysym.lower()
    mapping = HEX_KEYBOARD_MAP if layout == "hex" else KEYBOARD_MAP
    return mapping.get(key)
