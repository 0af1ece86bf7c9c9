"""
64x32 monochrome framebuffer.

Pixels change only through ``draw()`` (XOR blit) and ``clear()``. Sprite
pixels that fall off the right or bottom edge wrap around to the
opposite edge, and the start coordinates are reduced modulo the screen
size first.

A host on another thread takes frames with ``present()``, which copies
the buffer and clears ``dirty`` together; it never writes the buffer.
"""

from .constants import DISPLAY_WIDTH, DISPLAY_HEIGHT, SPRITE_WIDTH


class Framebuffer:
    """One byte (0 or 1) per pixel, row-major"""

    width = DISPLAY_WIDTH
    height = DISPLAY_HEIGHT

    def __init__(self):
        self._pixels = bytearray(DISPLAY_WIDTH * DISPLAY_HEIGHT)
        self.dirty = False

    def reset(self):
        self._pixels[:] = bytes(len(self._pixels))
        self.dirty = False

    def clear(self):
        """00E0: Clear display"""
        self._pixels[:] = bytes(len(self._pixels))
        self.dirty = True

    def draw(self, x: int, y: int, sprite_rows: bytes) -> bool:
        """
        XOR ``sprite_rows`` (one byte per row, MSB leftmost) at (x, y).

        Returns True if any lit pixel was turned off (collision). The
        result only ever goes from False to True within one draw.
        """
        collision = False
        x %= DISPLAY_WIDTH
        y %= DISPLAY_HEIGHT

        for row, sprite_byte in enumerate(sprite_rows):
            py = (y + row) % DISPLAY_HEIGHT
            base = py * DISPLAY_WIDTH
            for col in range(SPRITE_WIDTH):
                if sprite_byte & (0x80 >> col):
                    offset = base + (x + col) % DISPLAY_WIDTH
                    if self._pixels[offset]:
                        collision = True
                    self._pixels[offset] ^= 1

        self.dirty = True
        return collision

    def get_pixel(self, x: int, y: int) -> int:
        return self._pixels[(y % DISPLAY_HEIGHT) * DISPLAY_WIDTH
                            + x % DISPLAY_WIDTH]

    @property
    def pixels(self) -> memoryview:
        """Read-only row-major view of the buffer"""
        return memoryview(self._pixels).toreadonly()

    def rows(self) -> list:
        """Copy of the screen as ``height`` lists of ``width`` ints"""
        return [list(self._pixels[r * DISPLAY_WIDTH:(r + 1) * DISPLAY_WIDTH])
                for r in range(DISPLAY_HEIGHT)]

    def lit_count(self) -> int:
        return sum(self._pixels)

    def present(self) -> bytes:
        """Copy the buffer and clear ``dirty`` in one step.

        A draw made after this call sets ``dirty`` again, so a host
        rendering the returned copy never loses a later frame.
        """
        self.dirty = False
        return bytes(self._pixels)

    def __str__(self):
        return "\n".join("".join("#" if p else "." for p in row)
                         for row in self.rows())
