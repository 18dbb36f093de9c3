"""The FBIMG file format: a 16-byte header followed by packed 24-bit pixels."""

from __future__ import annotations

import enum
import os
import struct
from dataclasses import dataclass

from fbtools.scale import scale_image

MAGIC = b"FBIMG"
HEADER_SIZE = 16
_HEADER = struct.Struct("<5sII3s")


class ColorOrder(enum.Enum):
    """Channel order of the pixel data."""

    RGB = "RGB"
    BGR = "BGR"


class FbImageError(ValueError):
    """Raised when FBIMG data is malformed."""


@dataclass(frozen=True)
class FbImage:
    """An image held as packed 3-byte pixels, row by row."""

    width: int
    height: int
    color: ColorOrder
    data: bytes

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise FbImageError("Image dimensions must not be negative")
        if len(self.data) != self.width * self.height * 3:
            raise FbImageError(
                f"Pixel data holds {len(self.data)} bytes, "
                f"expected {self.width * self.height * 3}"
            )

    def rgb_pixels(self) -> bytes:
        """Return the pixel data in RGB order."""
        if self.color is ColorOrder.RGB:
            return bytes(self.data)
        swapped = bytearray(self.data)
        swapped[0::3] = self.data[2::3]
        swapped[2::3] = self.data[0::3]
        return bytes(swapped)


def decode(data: bytes) -> FbImage:
    """Parse a complete FBIMG blob."""
    if len(data) < len(MAGIC):
        raise FbImageError("Unexpected end of file")
    if data[: len(MAGIC)] != MAGIC:
        raise FbImageError("Not a valid FBIMG file")
    if len(data) < HEADER_SIZE:
        raise FbImageError("Unexpected end of file")
    _, width, height, tag = _HEADER.unpack_from(data)
    color = ColorOrder.BGR if tag == b"BGR" else ColorOrder.RGB
    size = width * height * 3
    pixels = data[HEADER_SIZE : HEADER_SIZE + size]
    if len(pixels) != size:
        raise FbImageError("Unexpected end of file")
    return FbImage(width, height, color, bytes(pixels))


def encode(image: FbImage) -> bytes:
    """Serialise an image to FBIMG bytes."""
    header = _HEADER.pack(
        MAGIC, image.width, image.height, image.color.value.encode("ascii")
    )
    return header + bytes(image.data)


def read_fbimg(path: str | os.PathLike[str]) -> FbImage:
    """Load an FBIMG file."""
    with open(path, "rb") as handle:
        return decode(handle.read())


def write_fbimg(path: str | os.PathLike[str], image: FbImage) -> None:
    """Write an image as an FBIMG file."""
    with open(path, "wb") as handle:
        handle.write(encode(image))


def fit_to_screen(image: FbImage, xres: int, yres: int) -> FbImage:
    """Shrink the image, keeping its aspect ratio, until it fits xres by yres."""
    width, height, data = image.width, image.height, image.data
    if xres < width:
        new_height = int(height * (xres / width))
        data = scale_image(data, False, width, height, xres, new_height)
        width, height = xres, new_height
    if yres < height:
        new_width = int(width * (yres / height))
        data = scale_image(data, False, width, height, new_width, yres)
        width, height = new_width, yres
    if data is image.data:
        return image
    return FbImage(width, height, image.color, data)