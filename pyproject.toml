[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fbtools"
version = "1.0.0"
description = "Tools for showing, converting, painting on and capturing FBIMG images on the Linux framebuffer"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["framebuffer", "fbdev", "image", "screenshot", "paint", "png"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console :: Framebuffer",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fbimg = "fbtools.fbimg_cli:main"
png2fbimg = "fbtools.convert:png2fbimg_main"
fbimg2png = "fbtools.convert:fbimg2png_main"
fbpaint = "fbtools.paint:main"
screenshotd = "fbtools.screenshotd:main"

[tool.hatch.build.targets.wheel]
packages = ["fbtools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
