import pytest

from fbtools.fbimage import ColorOrder, FbImage, write_fbimg
from fbtools.fbimg_cli import main, parse_offset


@pytest.mark.parametrize(
    "text, expected",
    [
        ("10x20", (10, 20)),
        ("0x0", (0, 0)),
        ("x5x6", (5, 6)),
        ("10xx20", (10, 20)),
        ("abcx5", (0, 5)),
        ("7px x 3", (7, 3)),
    ],
)
def test_parse_offset(text, expected):
    assert parse_offset(text) == expected


@pytest.mark.parametrize("text", ["", "10", "10x", "x", "xxx"])
def test_parse_offset_rejects_bad_format(text):
    with pytest.raises(ValueError, match="widthxheight"):
        parse_offset(text)


def test_version(capsys):
    assert main(["-v"]) == 0
    assert capsys.readouterr().out.strip() == "fbimg version 1.0"


def test_help(capsys):
    assert main(["--help"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Usage: fbimg [options] image_path")
    assert "--centered" in out


def test_unknown_option(capsys):
    assert main(["--bogus"]) == 1
    assert "Unrecognized option" in capsys.readouterr().out


def test_missing_image_path(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().err


def test_bad_offset(capsys, tmp_path):
    assert main(["-o", "12", str(tmp_path / "a.fbimg")]) == 1
    assert "Invalid offset format" in capsys.readouterr().err


def test_missing_file(capsys, tmp_path):
    assert main([str(tmp_path / "missing.fbimg")]) == 1
    assert "Error opening file" in capsys.readouterr().err


def test_not_fbimg(capsys, tmp_path):
    path = tmp_path / "bad.fbimg"
    path.write_bytes(b"NOTANIMAGEFILE!!")
    assert main([str(path)]) == 1
    assert "Not a valid FBIMG file" in capsys.readouterr().err


def test_truncated_file(capsys, tmp_path):
    path = tmp_path / "short.fbimg"
    path.write_bytes(b"FBI")
    assert main([str(path)]) == 1
    assert "Unexpected end of file" in capsys.readouterr().err


def test_help_wins_before_file_is_read(capsys, tmp_path):
    path = tmp_path / "img.fbimg"
    write_fbimg(path, FbImage(1, 1, ColorOrder.RGB, b"\x01\x02\x03"))
    assert main(["-h", str(path)]) == 0
    assert "Usage:" in capsys.readouterr().out