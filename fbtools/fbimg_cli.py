"""Command that shows an FBIMG file on the framebuffer."""

from __future__ import annotations

import getopt
import re
import sys

from fbtools.fbimage import FbImageError, fit_to_screen, read_fbimg
from fbtools.framebuffer import FramebufferError, open_framebuffer

PROG = "fbimg"
VERSION_TEXT = "fbimg version 1.0"
_OFFSET_FORMAT_ERROR = "Invalid offset format. Use widthxheight."
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    """Read the leading integer of text, or 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_offset(text: str) -> tuple[int, int]:
    """Parse an offset written as XxY; raise ValueError on a bad format."""
    tokens = [token for token in text.split("x") if token]
    if len(tokens) < 2:
        raise ValueError(_OFFSET_FORMAT_ERROR)
    return _atoi(tokens[0]), _atoi(tokens[1])


def _usage() -> str:
    return (
        f"Usage: {PROG} [options] image_path\n"
        "  -h, --help       Show this help message.\n"
        "  -v, --version    Show version information.\n"
        "  -o, --offset     Set offset. Takes an argument in the format widthxheight.\n"
        "  -c, --centered   Enable centered mode\n"
        "  This option bypasses --offset."
    )


def main(argv: list[str] | None = None) -> int:
    """Display an FBIMG file on /dev/fb0; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options, operands = getopt.gnu_getopt(
            args, "hvo:c", ["help", "version", "offset=", "centered"]
        )
    except getopt.GetoptError:
        print("Unrecognized option")
        return 1

    centered = False
    offset_x = offset_y = 0
    for name, value in options:
        if name in ("-h", "--help"):
            print(_usage())
            return 0
        if name in ("-v", "--version"):
            print(VERSION_TEXT)
            return 0
        if name in ("-o", "--offset"):
            try:
                offset_x, offset_y = parse_offset(value)
            except ValueError as exc:
                print(exc, file=sys.stderr)
                return 1
        elif name in ("-c", "--centered"):
            centered = True

    if not operands:
        print(f"Usage: {PROG} <image_path>", file=sys.stderr)
        return 1

    try:
        image = read_fbimg(operands[0])
    except FbImageError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error opening file: {exc.strerror or exc}", file=sys.stderr)
        return 1

    try:
        with open_framebuffer() as framebuffer:
            info = framebuffer.info
            image = fit_to_screen(image, info.xres, info.yres)
            if centered:
                offset_x, offset_y = info.centered_offset(image.width, image.height)
            framebuffer.draw_image(image, offset_x, offset_y)
    except FramebufferError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())