import pytest

from fbtools import paint
from fbtools.fbimage import ColorOrder, read_fbimg
from fbtools.framebuffer import Bitfield, Framebuffer, ScreenInfo
from fbtools.paint import (
    Brush,
    Canvas,
    bresenham,
    parse_color,
    parse_mouse_packet,
)

XRES, YRES = 10, 8
RED = (255, 0, 0)
BLACK = (0, 0, 0)


def make_framebuffer():
    info = ScreenInfo(
        xres=XRES,
        yres=YRES,
        bits_per_pixel=32,
        line_length=XRES * 4,
        smem_len=XRES * YRES * 4,
        red=Bitfield(16, 8),
        green=Bitfield(8, 8),
        blue=Bitfield(0, 8),
    )
    return Framebuffer(info, bytearray(XRES * YRES * 4))


def make_canvas(width=XRES, height=YRES, size=2, color=RED):
    framebuffer = make_framebuffer()
    return Canvas(framebuffer, width, height, Brush(color=color, size=size))


def test_bresenham_horizontal_line():
    assert bresenham(0, 0, 3, 0) == [(0, 0), (1, 0), (2, 0), (3, 0)]


def test_bresenham_single_point():
    assert bresenham(4, 5, 4, 5) == [(4, 5)]


@pytest.mark.parametrize(
    "start,end", [((0, 0), (7, 3)), ((9, 2), (1, 6)), ((3, 8), (3, 0)), ((5, 5), (0, 0))]
)
def test_bresenham_invariants(start, end):
    points = bresenham(*start, *end)
    assert points[0] == start
    assert points[-1] == end
    assert len(points) == max(abs(end[0] - start[0]), abs(end[1] - start[1])) + 1
    for (ax, ay), (bx, by) in zip(points, points[1:]):
        assert abs(ax - bx) <= 1 and abs(ay - by) <= 1


def test_parse_color_hash_prefix():
    assert parse_color("#ff8000", BLACK) == (0xFF, 0x80, 0x00)


def test_parse_color_0x_prefix():
    assert parse_color("0x0000ff", BLACK) == (0x00, 0x00, 0xFF)


def test_parse_color_reads_at_most_six_digits():
    assert parse_color("1234567", BLACK) == (0x12, 0x34, 0x56)


def test_parse_color_invalid_keeps_default():
    assert parse_color("zz", RED) == RED


def test_parse_mouse_packet_signed_deltas():
    assert parse_mouse_packet(bytes([1, 5, 0xFB])) == (1, 5, -5)


def test_parse_mouse_packet_wrong_length():
    with pytest.raises(ValueError):
        parse_mouse_packet(b"\x00\x01")


def test_clamp_full_screen():
    canvas = make_canvas()
    assert canvas.clamp(-3, 20) == (0, YRES - 1)


def test_clamp_centered_image():
    canvas = make_canvas(width=6, height=4)
    assert canvas.clamp(0, 0) == (2, 2)
    assert canvas.clamp(100, 100) == (XRES - 2 - 1, YRES - 2 - 1)


def test_draw_circle_paints_disc():
    canvas = make_canvas(size=2)
    canvas.draw_circle(4, 4)
    fb = canvas.framebuffer
    assert fb.get_pixel(4, 4) == RED
    assert fb.get_pixel(4, 3) == RED
    assert fb.get_pixel(3, 4) == RED
    assert fb.get_pixel(5, 5) == BLACK


def test_draw_circle_skips_last_column():
    canvas = make_canvas(size=2)
    canvas.draw_circle(XRES - 1, 0)
    fb = canvas.framebuffer
    assert fb.get_pixel(XRES - 1, 0) == BLACK
    assert fb.get_pixel(XRES - 2, 0) == RED


def test_draw_circle_stays_inside_image_area():
    canvas = make_canvas(width=6, height=4, size=4)
    canvas.draw_circle(2, 2)
    fb = canvas.framebuffer
    assert fb.get_pixel(2, 2) == RED
    assert fb.get_pixel(1, 2) == BLACK
    assert fb.get_pixel(2, 1) == BLACK


def test_stroke_paints_line():
    canvas = make_canvas(size=1)
    canvas.stroke(1, 1, 5, 1)
    fb = canvas.framebuffer
    assert [fb.get_pixel(x, 1) for x in range(1, 6)] == [RED] * 5
    assert fb.get_pixel(6, 1) == BLACK
    assert fb.get_pixel(0, 1) == BLACK


def test_handle_command_quit_actions():
    canvas = make_canvas()
    assert canvas.handle_command("dq\n") == paint.DISCARD_AND_QUIT
    assert canvas.handle_command("sq\n") == paint.SAVE_AND_QUIT


def test_handle_command_sets_size():
    canvas = make_canvas()
    assert canvas.handle_command("12\n") is None
    assert canvas.brush.size == 12


def test_handle_command_sets_color():
    canvas = make_canvas()
    canvas.handle_command("#00ff00\n")
    assert canvas.brush.color == (0x00, 0xFF, 0x00)


def test_handle_command_zero_is_black():
    canvas = make_canvas()
    canvas.handle_command("0\n")
    assert canvas.brush.color == BLACK
    assert canvas.brush.size == 2


def test_snapshot_reads_image_area():
    canvas = make_canvas(width=6, height=4, size=0)
    canvas.draw_circle(4, 4)
    snap = canvas.snapshot()
    assert (snap.width, snap.height) == (6, 4)
    assert snap.color is ColorOrder.RGB
    index = (2 * 6 + 2) * 3
    assert tuple(snap.data[index : index + 3]) == canvas.framebuffer.get_pixel(4, 4)
    assert tuple(snap.data[index : index + 3]) == RED


def test_save_round_trip(tmp_path):
    canvas = make_canvas(size=4)
    canvas.stroke(2, 2, 6, 5)
    path = tmp_path / "out.fbimg"
    saved = canvas.save(path)
    assert read_fbimg(path) == saved
    assert saved == canvas.snapshot()


def test_main_help(capsys):
    assert paint.main(["--help"]) == 0
    assert "Usage:" in capsys.readouterr().out


def test_main_rejects_non_positive_size(capsys):
    assert paint.main(["-s", "0"]) == 1
    assert "Brush size must be a positive integer" in capsys.readouterr().err


def test_main_rejects_non_numeric_size(capsys):
    assert paint.main(["--size", "abc"]) == 1
    assert "Brush size must be a positive integer" in capsys.readouterr().err


def test_main_unknown_option(capsys):
    assert paint.main(["--bogus"]) == 1
    assert "Usage:" in capsys.readouterr().err