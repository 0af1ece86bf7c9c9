"""XOR blit, collision and edge wrapping."""

from chip8vm.display import Framebuffer


class TestDraw:

    def test_draw_then_redraw_erases_with_collision(self):
        fb = Framebuffer()
        assert fb.draw(0, 0, b"\xFF") is False
        assert fb.lit_count() == 8
        assert fb.draw(0, 0, b"\xFF") is True
        assert fb.lit_count() == 0

    def test_msb_is_leftmost(self):
        fb = Framebuffer()
        fb.draw(10, 5, b"\x81")
        assert fb.get_pixel(10, 5) == 1
        assert fb.get_pixel(17, 5) == 1
        assert fb.lit_count() == 2

    def test_collision_sticks_once_set(self):
        fb = Framebuffer()
        fb.draw(0, 0, b"\x80")
        # First row collides, second row lands on empty pixels
        assert fb.draw(0, 0, b"\x80\xFF") is True
        assert fb.get_pixel(0, 0) == 0
        assert fb.lit_count() == 8

    def test_wraps_horizontally(self):
        fb = Framebuffer()
        fb.draw(60, 0, b"\xFF")
        lit = [x for x in range(64) if fb.get_pixel(x, 0)]
        assert lit == [0, 1, 2, 3, 60, 61, 62, 63]

    def test_wraps_vertically(self):
        fb = Framebuffer()
        fb.draw(0, 31, b"\x80\x80")
        assert fb.get_pixel(0, 31) == 1
        assert fb.get_pixel(0, 0) == 1

    def test_start_coordinates_reduced_modulo_screen(self):
        fb = Framebuffer()
        fb.draw(66, 33, b"\x80")
        assert fb.get_pixel(2, 1) == 1


class TestPresentation:

    def test_dirty_flag_lifecycle(self):
        fb = Framebuffer()
        assert not fb.dirty
        fb.draw(0, 0, b"\x01")
        assert fb.dirty
        fb.present()
        assert not fb.dirty
        fb.clear()
        assert fb.dirty
        assert fb.lit_count() == 0

    def test_pixels_view_is_read_only(self):
        fb = Framebuffer()
        fb.draw(1, 0, b"\x80")
        view = fb.pixels
        assert view.readonly
        assert view[1] == 1
        assert len(view) == 64 * 32

    def test_rows_and_str(self):
        fb = Framebuffer()
        fb.draw(0, 0, b"\xC0")
        rows = fb.rows()
        assert len(rows) == 32 and len(rows[0]) == 64
        assert rows[0][:3] == [1, 1, 0]
        assert str(fb).splitlines()[0].startswith("##.")

    def test_present_returns_copy_and_keeps_later_draws_dirty(self):
        fb = Framebuffer()
        fb.draw(0, 0, b"\x80")
        frame = fb.present()
        assert not fb.dirty
        assert frame[0] == 1
        fb.draw(8, 0, b"\x80")
        assert fb.dirty
        assert frame[8] == 0
        assert fb.present()[8] == 1
