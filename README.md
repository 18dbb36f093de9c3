# fbtools

Small tools for working with images on the Linux framebuffer (`/dev/fb0`)
without a display server. Images are stored in the simple FBIMG format:

| Bytes | Content                                   |
|-------|-------------------------------------------|
| 0–4   | the magic `FBIMG`                         |
| 5–8   | width, unsigned 32-bit little endian      |
| 9–12  | height, unsigned 32-bit little endian     |
| 13–15 | channel order, `RGB` or `BGR`             |
| 16–   | pixel data, 3 bytes per pixel, row by row |

A channel tag other than `BGR` is read as `RGB`. Every file the tools write
uses `RGB`.

## Installation

```
pip install .
```

The framebuffer tools need read or write access to `/dev/fb0`. Painting also
needs `/dev/input/mice`. The screenshot daemon needs a keyboard event device.
Usually this means being in the `video` and `input` groups or running as root.
Only framebuffers with 8 bits per colour channel are supported.

## Commands

Every command takes `-h`/`--help`. The exit status is 0 on success and 1 on
an error.

### Showing an image

```
fbimg [--offset XxY | --centered] image.fbimg
```

This draws the image on the framebuffer. An image wider or taller than the
screen is scaled down to fit, keeping its aspect ratio. `--offset 100x50`
places its top-left corner at (100, 50); an offset that would put part of the
image off screen is an error. `--centered` centres the image and overrides
`--offset`. `-v`/`--version` prints the version.

### Converting between PNG and FBIMG

```
png2fbimg picture.png picture.fbimg
fbimg2png picture.fbimg picture.png
```

`png2fbimg` writes an `RGB` FBIMG file; any transparency in the PNG is
dropped. `fbimg2png` writes an opaque RGBA PNG. Both take `-v`/`--version`.

### Painting

```
fbpaint [--color '#ff0000'] [--size 10] [image.fbimg]
```

The brush starts white and 30 pixels wide unless `--color` or `--size` says
otherwise. Move the mouse to steer the cursor. Hold the left button to draw.
Typing into the terminal changes the brush while painting:

- a positive number followed by Enter sets the brush size;
- a hex colour such as `#00ff00` or `0x00ff00` sets the brush colour;
- `sq` followed by Enter saves the picture and quits;
- `dq` followed by Enter quits without saving.

Ctrl-C also saves and quits. When an image is given it is shown centred
(scaled down if needed), painting is confined to it, and saving writes back
to that file. With no file given, painting starts on a cleared screen and is
saved to `paint.fbimg` in the current directory. `-u`/`--usage` prints a
one-line description.

### Screenshots

```
screenshotd /dev/input/event0 &
```

This watches the given keyboard device. Pressing Print Screen or F5 saves the
whole framebuffer to `/tmp/screenshot_<unix time>.fbimg`. On start it begins
a new session, changes to `/` and sends its standard input and output to
`/dev/null`, but it does not fork itself, so start it in the background as
shown. It stops when the device can no longer be read or a screenshot cannot
be taken.

## Library use

```python
from fbtools.fbimage import read_fbimg, write_fbimg, fit_to_screen
from fbtools.scale import scale_image

image = read_fbimg("picture.fbimg")
small = fit_to_screen(image, 640, 480)
write_fbimg("small.fbimg", small)
```

- `fbtools.fbimage` holds `FbImage` (width, height, `ColorOrder`, pixel
  bytes), `decode`/`encode` for FBIMG bytes, `read_fbimg`/`write_fbimg` for
  files and `fit_to_screen`. Malformed data raises `FbImageError`.
- `fbtools.scale.scale_image` resizes packed 3-byte pixel data with bilinear
  interpolation and always returns RGB.
- `fbtools.convert` offers `png_to_fbimg` and `fbimg_to_png`.
- `fbtools.framebuffer.open_framebuffer(path="/dev/fb0", writable=True)`
  maps a framebuffer device and returns a `Framebuffer`, usable as a context
  manager. It has `draw_image`, `get_pixel`, `set_pixel`, `capture` (a
  rectangle as an `FbImage`) and `clear`. A `Framebuffer` can also be built
  from a `ScreenInfo` and any writable buffer, which is handy for testing.
  Problems raise `FramebufferError`.
- `fbtools.paint` holds `Brush`, `Canvas`, `bresenham`, `parse_color` and
  `parse_mouse_packet`; `fbtools.screenshotd` holds `parse_input_event`,
  `is_screenshot_key`, `screenshot_path` and `take_screenshot`.

## What it does not do

Only Linux fbdev devices are handled; there is no support for DRM/KMS, X11
or Wayland. Only PNG and FBIMG are converted. The painter has no undo and no
drawing tools other than the round brush.