"""Tests for Framebuffer and image helpers."""

import pytest
from PIL import Image

from cubik.core.frame import Framebuffer, load_image_frames, parse_color
from cubik.exceptions import OutOfBoundsError, ValidationError

from conftest import BLACK, BLUE, GREEN, RED


class TestFramebuffer:
    """Pixel access and bookkeeping."""

    def test_defaults_to_matrix_size_and_black(self):
        fb = Framebuffer()
        assert (fb.width, fb.height) == (20, 5)
        assert fb.pixels == [BLACK] * 100

    def test_set_and_get_pixel(self):
        fb = Framebuffer(4, 3)
        fb.set_pixel(3, 2, RED)

        assert fb.get_pixel(3, 2) == RED
        assert fb.pixels[2 * 4 + 3] == RED

    @pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (4, 0), (0, 3), (10, 10)])
    def test_out_of_bounds_raises(self, x, y):
        fb = Framebuffer(4, 3)

        with pytest.raises(OutOfBoundsError):
            fb.set_pixel(x, y, RED)
        with pytest.raises(OutOfBoundsError):
            fb.get_pixel(x, y)

    def test_out_of_bounds_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            Framebuffer(2, 2).get_pixel(2, 0)

    def test_clear(self):
        fb = Framebuffer(3, 3)
        fb.set_pixel(1, 1, RED)
        fb.clear(GREEN)

        assert fb.pixels == [GREEN] * 9

    def test_pixels_is_a_copy(self):
        fb = Framebuffer(2, 1)
        pixels = fb.pixels
        pixels[0] = RED

        assert fb.get_pixel(0, 0) == BLACK

    def test_from_pixels(self):
        fb = Framebuffer.from_pixels(2, 2, [RED, GREEN, BLUE, BLACK])

        assert fb.get_pixel(1, 0) == GREEN
        assert fb.get_pixel(0, 1) == BLUE

    def test_from_pixels_wrong_length(self):
        with pytest.raises(ValidationError):
            Framebuffer.from_pixels(2, 2, [RED])

    def test_invalid_size(self):
        with pytest.raises(ValidationError):
            Framebuffer(0, 5)


class TestParseColor:

    def test_with_and_without_hash(self):
        assert parse_color("#FF0000") == RED
        assert parse_color("00ff00") == GREEN

    @pytest.mark.parametrize("value", ["#FFF", "not-a-color", "#GG0000"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_color(value)


class TestImages:
    """Pillow conversion both ways."""

    def test_to_image_scaled(self):
        fb = Framebuffer(4, 2)
        fb.set_pixel(1, 0, RED)
        img = fb.to_image(scale=3)

        assert img.size == (12, 6)
        assert img.getpixel((3, 0)) == RED
        assert img.getpixel((0, 0)) == BLACK

    def test_save(self, tmp_path):
        path = tmp_path / "frame.png"
        Framebuffer(4, 2, background=BLUE).save(path)

        with Image.open(path) as img:
            assert img.size == (4, 2)
            assert img.convert("RGB").getpixel((0, 0)) == BLUE

    def test_load_still_image(self, tmp_path):
        path = tmp_path / "still.png"
        Image.new("RGB", (20, 5), GREEN).save(path)

        frames = load_image_frames(path, 20, 5)

        assert len(frames) == 1
        assert frames[0] == [GREEN] * 100

    def test_load_animated_gif_resizes(self, tmp_path):
        path = tmp_path / "anim.gif"
        first = Image.new("RGB", (40, 10), RED)
        second = Image.new("RGB", (40, 10), BLUE)
        first.save(path, save_all=True, append_images=[second], duration=100, loop=0)

        frames = load_image_frames(path, 20, 5)

        assert len(frames) == 2
        assert all(len(frame) == 100 for frame in frames)
        assert frames[0][0] == RED
        assert frames[1][0] == BLUE
