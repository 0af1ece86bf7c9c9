"""Shared fixtures: a seeded machine and a tiny program builder."""

import pytest

from chip8vm import Chip8CPU
from chip8vm.constants import PROGRAM_START


def assemble(*words) -> bytes:
    """Big-endian encode instruction words"""
    return b"".join(w.to_bytes(2, "big") for w in words)


def image(layout: dict) -> bytes:
    """Build a ROM from ``{address: word}`` (addresses >= 0x200)"""
    end = max(layout) + 2 - PROGRAM_START
    data = bytearray(end)
    for address, word in layout.items():
        offset = address - PROGRAM_START
        data[offset:offset + 2] = word.to_bytes(2, "big")
    return bytes(data)


@pytest.fixture
def cpu():
    return Chip8CPU(seed=1234)


@pytest.fixture
def run(cpu):
    """Load words at 0x200 and execute ``cycles`` of them (default: all)"""
    def _run(*words, cycles=None):
        cpu.load_rom(assemble(*words))
        result = None
        for _ in range(len(words) if cycles is None else cycles):
            result = cpu.cycle(0.0)
        return result
    return _run
