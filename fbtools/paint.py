"""A mouse-driven painting program that draws straight onto the framebuffer."""

from __future__ import annotations

import getopt
import os
import re
import sys
from dataclasses import dataclass

from fbtools.fbimage import FbImage, FbImageError, fit_to_screen, read_fbimg, write_fbimg
from fbtools.framebuffer import Framebuffer, FramebufferError, open_framebuffer

PROG = "paint"
DEFAULT_FILENAME = "paint.fbimg"
MOUSE_DEVICE = "/dev/input/mice"

DISCARD_AND_QUIT = "discard"
SAVE_AND_QUIT = "save"

_HEX_COLOR = re.compile(r"\s*([0-9a-fA-F]{1,6})")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_HIDE_CURSOR = "\033[?25l"
_SHOW_CURSOR = "\033[?25h"
_CLEAR_CONSOLE = "\033[H\033[J"


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


@dataclass
class Brush:
    """The colour and diameter used for painting."""

    color: tuple[int, int, int] = (0xFF, 0xFF, 0xFF)
    size: int = 30


def bresenham(x1: int, y1: int, x2: int, y2: int) -> list[tuple[int, int]]:
    """Return the points of the line from (x1, y1) to (x2, y2), both ends included."""
    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = int((dx if dx > dy else -dy) / 2)
    x, y = x1, y1
    points = []
    while True:
        points.append((x, y))
        if x == x2 and y == y2:
            return points
        e2 = err
        if e2 > -dx:
            err -= dy
            x += sx
        if e2 < dy:
            err += dx
            y += sy


def parse_color(text: str, default: tuple[int, int, int]) -> tuple[int, int, int]:
    """Parse a hex colour such as '#ff8000' or '0xff8000'; return default if none."""
    if text.startswith("#"):
        text = text[1:]
    elif text.startswith("0x"):
        text = text[2:]
    match = _HEX_COLOR.match(text)
    if not match:
        return default
    value = int(match.group(1), 16)
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


def parse_mouse_packet(data: bytes) -> tuple[int, int, int]:
    """Split a 3-byte PS/2 mouse packet into (buttons, dx, dy) with signed deltas."""
    if len(data) != 3:
        raise ValueError(f"Mouse packet must be 3 bytes, got {len(data)}")
    buttons, dx, dy = data

    def signed(value: int) -> int:
        return value - 256 if value >= 128 else value

    return buttons, signed(dx), signed(dy)


class Canvas:
    """The painted area: an image centred on the framebuffer and a brush."""

    def __init__(
        self, framebuffer: Framebuffer, image_width: int, image_height: int, brush: Brush
    ) -> None:
        self.framebuffer = framebuffer
        self.image_width = image_width
        self.image_height = image_height
        self.brush = brush
        info = framebuffer.info
        self._margin_x = (info.xres - image_width) // 2
        self._margin_y = (info.yres - image_height) // 2
        self._max_x = info.xres - self._margin_x - 1
        self._max_y = info.yres - self._margin_y - 1

    def clamp(self, x: int, y: int) -> tuple[int, int]:
        """Keep a cursor position inside the image area."""
        x = min(max(x, self._margin_x), self._max_x)
        y = min(max(y, self._margin_y), self._max_y)
        return x, y

    def draw_circle(self, x: int, y: int) -> None:
        """Stamp a filled circle of the brush colour centred on (x, y)."""
        radius = self.brush.size // 2
        limit = len(self.framebuffer._view)
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                if dx * dx + dy * dy > radius * radius:
                    continue
                px, py = x + dx, y + dy
                if not (
                    self._margin_x <= px < self._max_x
                    and self._margin_y <= py < self._max_y
                ):
                    continue
                if 0 <= self.framebuffer.pixel_offset(px, py) < limit:
                    self.framebuffer.set_pixel(px, py, self.brush.color)

    def stroke(self, x1: int, y1: int, x2: int, y2: int) -> None:
        """Paint a line of circles from (x1, y1) to (x2, y2)."""
        for x, y in bresenham(x1, y1, x2, y2):
            self.draw_circle(x, y)

    def handle_command(self, text: str) -> str | None:
        """Apply a typed command; return DISCARD_AND_QUIT or SAVE_AND_QUIT to stop."""
        if text == "dq\n":
            return DISCARD_AND_QUIT
        if text == "sq\n":
            return SAVE_AND_QUIT
        size = _atoi(text)
        if size > 0:
            self.brush.size = size
        else:
            self.brush.color = parse_color(text, self.brush.color)
        return None

    def snapshot(self) -> FbImage:
        """Read the image area back from the framebuffer."""
        return self.framebuffer.capture(
            self._margin_x, self._margin_y, self.image_width, self.image_height
        )

    def save(self, path: str | os.PathLike[str]) -> FbImage:
        """Write the image area to an FBIMG file and return it."""
        image = self.snapshot()
        write_fbimg(path, image)
        return image


def _usage_lines() -> list[str]:
    return [
        f"Usage: {PROG} [options] [filename]",
        "Options:",
        "  -h, --help     Show this help message",
        "  -u, --usage    Show usage information",
        "  -c, --color    Set brush color (hex format)",
        "  -s, --size     Set brush size (positive integer)",
    ]


def _finish(status: int) -> int:
    sys.stdout.write(_CLEAR_CONSOLE)
    sys.stdout.flush()
    return status


def _save(canvas: Canvas, filename: str) -> int:
    try:
        canvas.save(filename)
    except OSError as exc:
        print(f"Error opening file for writing: {exc.strerror or exc}", file=sys.stderr)
        return 1
    return _finish(0)


def _event_loop(canvas: Canvas, mouse: int, filename: str, interrupted: list[bool]) -> int:
    import select

    framebuffer = canvas.framebuffer
    x = y = 0
    cursor = framebuffer.get_pixel(0, 0)
    while True:
        if interrupted[0]:
            return _save(canvas, filename)
        try:
            chunk = os.read(sys.stdin.fileno(), 256)
        except (BlockingIOError, InterruptedError):
            chunk = b""
        if chunk:
            action = canvas.handle_command(chunk.decode("latin-1"))
            if action == DISCARD_AND_QUIT:
                return _finish(0)
            if action == SAVE_AND_QUIT:
                return _save(canvas, filename)
        ready, _, _ = select.select([mouse], [], [], 0.01)
        if not ready:
            continue
        packet = os.read(mouse, 3)
        if len(packet) != 3:
            continue
        buttons, dx, dy = parse_mouse_packet(packet)
        prev_x, prev_y = x, y
        x, y = canvas.clamp(x + dx, y - dy)
        framebuffer.set_pixel(prev_x, prev_y, cursor)
        cursor = framebuffer.get_pixel(x, y)
        framebuffer.set_pixel(x, y, tuple(255 - channel for channel in cursor))
        if buttons & 1:
            canvas.stroke(prev_x, prev_y, x, y)


def _run(brush: Brush, path: str | None) -> int:
    import fcntl
    import signal
    import termios

    interrupted = [False]

    def on_interrupt(signum, frame) -> None:
        interrupted[0] = True

    stdin = sys.stdin.fileno()
    sys.stdout.write(_HIDE_CURSOR)
    sys.stdout.flush()
    previous_handler = signal.signal(signal.SIGINT, on_interrupt)
    saved_terminal = termios.tcgetattr(stdin) if os.isatty(stdin) else None
    if saved_terminal is not None:
        quiet = termios.tcgetattr(stdin)
        quiet[3] &= ~termios.ECHO
        termios.tcsetattr(stdin, termios.TCSANOW, quiet)
    saved_flags = fcntl.fcntl(stdin, fcntl.F_GETFL)
    fcntl.fcntl(stdin, fcntl.F_SETFL, saved_flags | os.O_NONBLOCK)
    try:
        try:
            framebuffer = open_framebuffer()
        except FramebufferError as exc:
            print(exc, file=sys.stderr)
            return 1
        with framebuffer:
            info = framebuffer.info
            if path is not None:
                try:
                    image = fit_to_screen(read_fbimg(path), info.xres, info.yres)
                except FbImageError as exc:
                    print(exc, file=sys.stderr)
                    return 1
                except OSError as exc:
                    print(f"Error opening file: {exc.strerror or exc}", file=sys.stderr)
                    return 1
                offset_x, offset_y = info.centered_offset(image.width, image.height)
                framebuffer.draw_image(image, offset_x, offset_y)
                width, height, filename = image.width, image.height, path
            else:
                framebuffer.clear()
                width, height, filename = info.xres, info.yres, DEFAULT_FILENAME
            canvas = Canvas(framebuffer, width, height, brush)
            try:
                mouse = os.open(MOUSE_DEVICE, os.O_RDONLY)
            except OSError as exc:
                print(f"Error opening mouse device: {exc.strerror or exc}", file=sys.stderr)
                return 1
            try:
                return _event_loop(canvas, mouse, filename, interrupted)
            finally:
                os.close(mouse)
    finally:
        fcntl.fcntl(stdin, fcntl.F_SETFL, saved_flags)
        if saved_terminal is not None:
            termios.tcsetattr(stdin, termios.TCSANOW, saved_terminal)
        signal.signal(signal.SIGINT, previous_handler)
        sys.stdout.write(_SHOW_CURSOR)
        sys.stdout.flush()


def main(argv: list[str] | None = None) -> int:
    """Paint on /dev/fb0 with the mouse; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options, operands = getopt.gnu_getopt(
            args, "huc:s:", ["help", "usage", "color=", "size="]
        )
    except getopt.GetoptError:
        print(f"Usage: {PROG} [options] [filename]", file=sys.stderr)
        return 1

    brush = Brush()
    for name, value in options:
        if name in ("-h", "--help"):
            print("\n".join(_usage_lines()))
            return 0
        if name in ("-u", "--usage"):
            print("A painting program that runs on the framebuffer")
            return 0
        if name in ("-c", "--color"):
            brush.color = parse_color(value, brush.color)
        elif name in ("-s", "--size"):
            brush.size = _atoi(value)
            if brush.size <= 0:
                print("Error: Brush size must be a positive integer", file=sys.stderr)
                return 1

    return _run(brush, operands[0] if operands else None)


if __name__ == "__main__":
    sys.exit(main())