"""Access to a Linux framebuffer device and its pixel layout."""

from __future__ import annotations

import mmap
import os
import struct
from dataclasses import dataclass

from fbtools.fbimage import ColorOrder, FbImage

FBIOGET_VSCREENINFO = 0x4600
FBIOGET_FSCREENINFO = 0x4602

_VAR_FORMAT = "@40I"
_FIX_FORMAT = "@16sLIIIIHHHILIIH2H0L"
VAR_SCREENINFO_SIZE = struct.calcsize(_VAR_FORMAT)
FIX_SCREENINFO_SIZE = struct.calcsize(_FIX_FORMAT)


class FramebufferError(OSError):
    """Raised when the framebuffer cannot be used."""


@dataclass(frozen=True)
class Bitfield:
    """Position of one colour channel inside a pixel, in bits."""

    offset: int = 0
    length: int = 0
    msb_right: int = 0


@dataclass(frozen=True)
class ScreenInfo:
    """The parts of the variable and fixed screen info that drawing needs."""

    xres: int
    yres: int
    bits_per_pixel: int
    line_length: int
    smem_len: int
    red: Bitfield
    green: Bitfield
    blue: Bitfield
    transp: Bitfield = Bitfield()

    def centered_offset(self, width: int, height: int) -> tuple[int, int]:
        """Offset that centres a width by height area on the screen."""
        return (self.xres - width) // 2, (self.yres - height) // 2


def parse_var_screeninfo(data: bytes) -> dict:
    """Extract resolution, depth and channel layout from fb_var_screeninfo."""
    if len(data) < VAR_SCREENINFO_SIZE:
        raise FramebufferError("Variable screen info is truncated")
    fields = struct.unpack_from(_VAR_FORMAT, data)
    return {
        "xres": fields[0],
        "yres": fields[1],
        "bits_per_pixel": fields[6],
        "red": Bitfield(*fields[8:11]),
        "green": Bitfield(*fields[11:14]),
        "blue": Bitfield(*fields[14:17]),
        "transp": Bitfield(*fields[17:20]),
    }


def parse_fix_screeninfo(data: bytes) -> dict:
    """Extract memory size and line length from fb_fix_screeninfo."""
    if len(data) < FIX_SCREENINFO_SIZE:
        raise FramebufferError("Fixed screen info is truncated")
    fields = struct.unpack_from(_FIX_FORMAT, data)
    return {"smem_len": fields[2], "line_length": fields[9]}


class Framebuffer:
    """Pixel-level access to framebuffer memory described by a ScreenInfo."""

    def __init__(self, info: ScreenInfo, buffer) -> None:
        if any(channel.length != 8 for channel in (info.red, info.green, info.blue)):
            raise FramebufferError(
                "framebuffer color depth per channel is not 8 bits; "
                "framebuffer not supported"
            )
        self.info = info
        self._buffer = buffer
        self._view = memoryview(buffer)
        self._bytes_per_pixel = info.bits_per_pixel // 8
        self._red = info.red.offset // 8
        self._green = info.green.offset // 8
        self._blue = info.blue.offset // 8
        self._alpha = info.transp.offset // 8 if info.transp.length > 0 else None

    def pixel_offset(self, x: int, y: int) -> int:
        """Byte offset of pixel (x, y) in framebuffer memory."""
        return y * self.info.line_length + x * self._bytes_per_pixel

    def _base(self, x: int, y: int) -> int:
        if not (0 <= x < self.info.xres and 0 <= y < self.info.yres):
            raise IndexError(f"Pixel ({x}, {y}) is outside the screen")
        return self.pixel_offset(x, y)

    def set_pixel(self, x: int, y: int, rgb) -> None:
        """Write an (r, g, b) colour at (x, y)."""
        base = self._base(x, y)
        red, green, blue = rgb
        self._view[base + self._red] = red
        self._view[base + self._green] = green
        self._view[base + self._blue] = blue

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """Read the (r, g, b) colour at (x, y)."""
        base = self._base(x, y)
        view = self._view
        return view[base + self._red], view[base + self._green], view[base + self._blue]

    def draw_image(self, image: FbImage, offset_x: int = 0, offset_y: int = 0) -> None:
        """Copy an image onto the screen with its top-left corner at the offset."""
        if (
            offset_x < 0
            or offset_y < 0
            or offset_x + image.width > self.info.xres
            or offset_y + image.height > self.info.yres
        ):
            raise FramebufferError("Offset out of bounds")
        pixels = image.rgb_pixels()
        row_size = image.width * 3
        for row in range(image.height):
            line = pixels[row * row_size : (row + 1) * row_size]
            for column in range(image.width):
                base = self.pixel_offset(offset_x + column, offset_y + row)
                red, green, blue = line[column * 3 : column * 3 + 3]
                if self._alpha is not None:
                    self._view[base + self._alpha] = 0xFF
                self._view[base + self._red] = red
                self._view[base + self._green] = green
                self._view[base + self._blue] = blue

    def capture(self, x: int, y: int, width: int, height: int) -> FbImage:
        """Read a rectangle of the screen as an RGB image."""
        if (
            x < 0
            or y < 0
            or width < 0
            or height < 0
            or x + width > self.info.xres
            or y + height > self.info.yres
        ):
            raise FramebufferError("Capture area out of bounds")
        data = bytearray()
        for row in range(y, y + height):
            for column in range(x, x + width):
                data.extend(self.get_pixel(column, row))
        return FbImage(width, height, ColorOrder.RGB, bytes(data))

    def clear(self) -> None:
        """Set every visible line of the framebuffer to zero."""
        size = min(self.info.yres * self.info.line_length, len(self._view))
        self._view[:size] = bytes(size)

    def close(self) -> None:
        """Release the framebuffer memory."""
        self._view.release()
        if isinstance(self._buffer, mmap.mmap):
            self._buffer.close()

    def __enter__(self) -> Framebuffer:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def open_framebuffer(path: str = "/dev/fb0", writable: bool = True) -> Framebuffer:
    """Open a framebuffer device, query its layout and map its memory."""
    import fcntl

    flags = os.O_RDWR if writable else os.O_RDONLY
    try:
        fd = os.open(path, flags)
    except OSError as exc:
        raise FramebufferError(f"Error opening framebuffer device: {exc}") from exc
    try:
        var = bytearray(VAR_SCREENINFO_SIZE)
        try:
            fcntl.ioctl(fd, FBIOGET_VSCREENINFO, var, True)
        except OSError as exc:
            raise FramebufferError(f"Error getting screen info: {exc}") from exc
        fix = bytearray(FIX_SCREENINFO_SIZE)
        try:
            fcntl.ioctl(fd, FBIOGET_FSCREENINFO, fix, True)
        except OSError as exc:
            raise FramebufferError(f"Error getting fixed screen info: {exc}") from exc
        info = ScreenInfo(**parse_var_screeninfo(var), **parse_fix_screeninfo(fix))
        access = mmap.ACCESS_WRITE if writable else mmap.ACCESS_READ
        try:
            buffer = mmap.mmap(fd, info.smem_len, access=access)
        except (OSError, ValueError) as exc:
            raise FramebufferError(f"Error mapping framebuffer memory: {exc}") from exc
    finally:
        os.close(fd)
    try:
        return Framebuffer(info, buffer)
    except FramebufferError:
        buffer.close()
        raise