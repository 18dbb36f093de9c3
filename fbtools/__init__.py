"""Show, convert, paint on and capture FBIMG images on the Linux framebuffer."""

__version__ = "1.0.0"