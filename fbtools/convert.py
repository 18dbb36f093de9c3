"""Conversion between PNG files and FBIMG files."""

from __future__ import annotations

import getopt
import os
import sys

from PIL import Image

from fbtools.fbimage import ColorOrder, FbImage, FbImageError, read_fbimg, write_fbimg

PathLike = str | os.PathLike


def _decode_png(path: PathLike) -> FbImage:
    with Image.open(path) as png:
        rgb = png.convert("RGBA").convert("RGB")
        return FbImage(rgb.width, rgb.height, ColorOrder.RGB, rgb.tobytes())


def _encode_png(image: FbImage, path: PathLike) -> None:
    rgb = Image.frombytes("RGB", (image.width, image.height), image.rgb_pixels())
    rgb.convert("RGBA").save(path, format="PNG")


def png_to_fbimg(input_path: PathLike, output_path: PathLike) -> FbImage:
    """Convert a PNG file to an RGB FBIMG file, dropping alpha; return the image."""
    image = _decode_png(input_path)
    write_fbimg(output_path, image)
    return image


def fbimg_to_png(input_path: PathLike, output_path: PathLike) -> FbImage:
    """Convert an FBIMG file to an opaque RGBA PNG file; return the image read."""
    image = read_fbimg(input_path)
    _encode_png(image, output_path)
    return image


def _parse(prog: str, argv: list[str] | None) -> tuple[int | None, list[str]]:
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options, operands = getopt.gnu_getopt(args, "hv", ["help", "version"])
    except getopt.GetoptError as exc:
        print(f"Unknown option: {exc.opt}", file=sys.stderr)
        return 1, []
    for name, _ in options:
        if name in ("-h", "--help"):
            print(f"Usage: {prog} [options] input output")
            print("Options:")
            print("  -h, --help       Show this help message")
            print("  -v, --version    Show version information")
            return 0, []
        if name in ("-v", "--version"):
            print(f"FBTools {prog} v1.0")
            return 0, []
    if len(operands) < 2:
        print("No input or output files specified.", file=sys.stderr)
        return 1, []
    return None, operands[:2]


def png2fbimg_main(argv: list[str] | None = None) -> int:
    """Command entry: png2fbimg input.png output.fbimg."""
    status, paths = _parse("png2fbimg", argv)
    if status is not None:
        return status
    input_path, output_path = paths
    try:
        image = _decode_png(input_path)
    except (OSError, ValueError) as exc:
        print(f"Error decoding PNG: {exc}", file=sys.stderr)
        return 1
    try:
        write_fbimg(output_path, image)
    except OSError:
        print(f"Error opening output file: {output_path}", file=sys.stderr)
        return 1
    return 0


def fbimg2png_main(argv: list[str] | None = None) -> int:
    """Command entry: fbimg2png input.fbimg output.png."""
    status, paths = _parse("fbimg2png", argv)
    if status is not None:
        return status
    input_path, output_path = paths
    try:
        image = read_fbimg(input_path)
    except FbImageError:
        print(f"Invalid file format: {input_path}", file=sys.stderr)
        return 1
    except OSError:
        print(f"Error opening input file: {input_path}", file=sys.stderr)
        return 1
    try:
        _encode_png(image, output_path)
    except (OSError, ValueError) as exc:
        print(f"Error encoding PNG: {exc}", file=sys.stderr)
        return 1
    return 0