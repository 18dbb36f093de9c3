"""Bilinear scaling of packed 24-bit pixel data."""

from __future__ import annotations

import struct

_FLOAT32 = struct.Struct("f")


def _f32(value: float) -> float:
    """Round a value to single precision, as the pixel arithmetic is defined."""
    return _FLOAT32.unpack(_FLOAT32.pack(value))[0]


def floorpx(x: float) -> int:
    """Largest integer not greater than x."""
    i = int(x)
    return i - 1 if x < i else i


def calc_index(width: int, height: int, x: int, y: int) -> int:
    """Byte offset of pixel (x, y) in a packed 3-byte-per-pixel image."""
    return (y * width + x) * 3


def lerp(a: int, b: int, t: float) -> int:
    """Interpolate between two channel values and clamp to 0..255."""
    result = _f32(a + _f32(t * (b - a)))
    if result < 0:
        result = 0.0
    if result > 255:
        result = 255.0
    return int(result)


def _sample_points(old: int, new: int) -> list[tuple[int, int, float]]:
    """For each output coordinate: the two source coordinates and the fraction."""
    ratio = _f32(old / new)
    points = []
    for position in range(new):
        orig = _f32(position * ratio)
        low = floorpx(orig)
        high = low + 1 if low + 1 < old else low
        points.append((low, high, _f32(orig - low)))
    return points


def scale_image(
    image: bytes | bytearray | memoryview,
    bgr: bool,
    width: int,
    height: int,
    new_width: int,
    new_height: int,
) -> bytes:
    """Resize packed pixel data with bilinear interpolation.

    The result is always in RGB order; BGR input is reordered first.
    """
    size = width * height * 3
    source = bytes(image)
    if len(source) < size:
        raise ValueError(
            f"Image data holds {len(source)} bytes, {size} needed for {width}x{height}"
        )
    source = source[:size]
    if bgr:
        converted = bytearray(size)
        converted[0::3] = source[2::3]
        converted[1::3] = source[1::3]
        converted[2::3] = source[0::3]
        source = bytes(converted)

    if new_width <= 0 or new_height <= 0:
        return b""

    columns = _sample_points(width, new_width)
    rows = _sample_points(height, new_height)
    scaled = bytearray(new_width * new_height * 3)

    for h, (y0, y1, fy) in enumerate(rows):
        for w, (x0, x1, fx) in enumerate(columns):
            top_left = calc_index(width, height, x0, y0)
            top_right = calc_index(width, height, x1, y0)
            bottom_left = calc_index(width, height, x0, y1)
            bottom_right = calc_index(width, height, x1, y1)
            target = calc_index(new_width, new_height, w, h)
            for channel in range(3):
                upper = lerp(source[top_left + channel], source[top_right + channel], fx)
                lower = lerp(
                    source[bottom_left + channel], source[bottom_right + channel], fx
                )
                scaled[target + channel] = lerp(upper, lower, fy)

    return bytes(scaled)