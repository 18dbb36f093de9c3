"""Daemon that saves the framebuffer to an FBIMG file on Print Screen or F5."""

from __future__ import annotations

import getopt
import os
import struct
import sys
import time
from collections.abc import Iterator
from dataclasses import dataclass

from fbtools.fbimage import FbImage, write_fbimg
from fbtools.framebuffer import Framebuffer, FramebufferError, open_framebuffer

PROG = "screenshotd"
SCREENSHOT_DIRECTORY = "/tmp"

INPUT_EVENT_FORMAT = "@llHHi"
INPUT_EVENT_SIZE = struct.calcsize(INPUT_EVENT_FORMAT)

EV_KEY = 1
KEY_F5 = 63
KEY_PRINT = 210
KEY_PRESSED = 1


@dataclass(frozen=True)
class InputEvent:
    """One record read from a Linux input event device."""

    seconds: int
    microseconds: int
    type: int
    code: int
    value: int


def parse_input_event(data: bytes) -> InputEvent:
    """Decode one struct input_event."""
    if len(data) != INPUT_EVENT_SIZE:
        raise ValueError(
            f"Input event must be {INPUT_EVENT_SIZE} bytes, got {len(data)}"
        )
    return InputEvent(*struct.unpack(INPUT_EVENT_FORMAT, data))


def is_screenshot_key(event: InputEvent) -> bool:
    """True for a press (not release or repeat) of Print Screen or F5."""
    return (
        event.type == EV_KEY
        and event.value == KEY_PRESSED
        and event.code in (KEY_PRINT, KEY_F5)
    )


def screenshot_path(timestamp: float, directory: str = SCREENSHOT_DIRECTORY) -> str:
    """File name for a screenshot taken at the given Unix time."""
    return os.path.join(directory, f"screenshot_{int(timestamp)}.fbimg")


def take_screenshot(framebuffer: Framebuffer, path: str | os.PathLike[str]) -> FbImage:
    """Save the whole visible screen as an RGB FBIMG file and return the image."""
    info = framebuffer.info
    image = framebuffer.capture(0, 0, info.xres, info.yres)
    write_fbimg(path, image)
    return image


def daemonize() -> None:
    """Detach from the terminal: start a new session, move to /, silence stdio."""
    try:
        os.setsid()
    except PermissionError:
        # Already a session or process group leader; keep running as is.
        pass
    os.chdir("/")
    null = os.open(os.devnull, os.O_RDWR)
    for stream in (0, 1, 2):
        os.dup2(null, stream)
    os.close(null)


def _events(fd: int) -> Iterator[InputEvent]:
    while True:
        data = os.read(fd, INPUT_EVENT_SIZE)
        if len(data) != INPUT_EVENT_SIZE:
            return
        yield parse_input_event(data)


def _usage() -> str:
    return f"Usage: {PROG} /dev/input/(keyboard_device_node)"


def main(argv: list[str] | None = None) -> int:
    """Watch a keyboard device and capture screenshots; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options, operands = getopt.gnu_getopt(args, "hu", ["help", "usage"])
    except getopt.GetoptError:
        print(_usage(), file=sys.stderr)
        return 1

    for name, _ in options:
        if name in ("-h", "--help"):
            print(f"Usage: {PROG} [options] /dev/input/(keyboard_device_node)")
            print("Options:")
            print("  -h, --help     Show this help message")
            print("  -u, --usage    Show usage information")
            return 0
        if name in ("-u", "--usage"):
            print(
                "This program captures screenshots when the Print Screen "
                "or F5 key is pressed."
            )
            return 0

    if not operands:
        print(_usage(), file=sys.stderr)
        return 1

    device = os.path.abspath(operands[0])
    try:
        daemonize()
    except OSError as exc:
        print(f"daemonize failed: {exc}", file=sys.stderr)
        return 1

    try:
        fd = os.open(device, os.O_RDONLY)
    except OSError:
        return 1
    try:
        for event in _events(fd):
            if not is_screenshot_key(event):
                continue
            try:
                with open_framebuffer(writable=False) as framebuffer:
                    take_screenshot(framebuffer, screenshot_path(time.time()))
            except (FramebufferError, OSError):
                return 1
    finally:
        os.close(fd)
    return 0


if __name__ == "__main__":
    sys.exit(main())