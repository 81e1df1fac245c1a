import pytest
from PIL import Image

from asciicut.cli import main
from asciicut.terminal import get_terminal_size, supports_truecolour


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "in.png"
    Image.new("RGB", (40, 40), (255, 255, 255)).save(path)
    return path


def test_prints_text_art(image_path, capsys):
    main([str(image_path), "-W", "10", "-f", "text", "--mono"])
    lines = capsys.readouterr().out.rstrip("\n").split("\n")
    assert lines == ["@" * 10] * 5


def test_custom_chars(image_path, capsys):
    main([str(image_path), "-W", "4", "-H", "1", "-f", "text", "--chars", "XY"])
    assert capsys.readouterr().out == "XXXX\n"


def test_ansi_output(image_path, capsys):
    main([str(image_path), "-W", "4", "-f", "ansi"])
    assert "\033[38;2;" in capsys.readouterr().out


def test_html_shape_output(image_path, tmp_path, capsys):
    shape = tmp_path / "dot.svg"
    shape.write_text('<svg viewBox="0 0 2 2"><circle cx="1" cy="1" r="1"/></svg>', encoding="utf-8")
    main([str(image_path), "-W", "3", "-H", "2", "--shape", str(shape)])
    out = capsys.readouterr().out
    assert out.startswith("<!DOCTYPE html>")
    assert out.count("<circle") == 6


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "nope.png")])
    assert excinfo.value.code == 1
    assert "File not found" in capsys.readouterr().err


def test_undecodable_file(tmp_path, capsys):
    path = tmp_path / "bad.png"
    path.write_bytes(b"garbage")
    with pytest.raises(SystemExit) as excinfo:
        main([str(path), "-W", "10"])
    assert excinfo.value.code == 1
    assert "DecodeFailure" in capsys.readouterr().err


def test_invalid_palette_size(image_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(image_path), "-W", "10", "-c", "2"])
    assert excinfo.value.code == 1
    assert "InvalidArgument" in capsys.readouterr().err


def test_oversized_image(image_path, monkeypatch, capsys):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 500)
    with pytest.raises(SystemExit) as excinfo:
        main([str(image_path), "-W", "10"])
    assert excinfo.value.code == 1
    assert "DecodeFailure" in capsys.readouterr().err


def test_bad_environment_config(image_path, monkeypatch, capsys):
    monkeypatch.setenv("ASCIICUT_CHUNK_HEIGHT", "lots")
    with pytest.raises(SystemExit) as excinfo:
        main([str(image_path), "-W", "10"])
    assert excinfo.value.code == 1
    assert "ASCIICUT_CHUNK_HEIGHT" in capsys.readouterr().err


def test_piped_output_defaults(monkeypatch):
    monkeypatch.setattr("asciicut.terminal._interactive", lambda: False)
    assert get_terminal_size() == (80, 24)
    assert not supports_truecolour()


def test_colour_detection_respects_term(monkeypatch):
    monkeypatch.setattr("asciicut.terminal._interactive", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")
    assert supports_truecolour()
    monkeypatch.setenv("TERM", "dumb")
    assert not supports_truecolour()
    monkeypatch.setenv("TERM", "xterm-256color")
    monkeypatch.setenv("NO_COLOR", "1")
    assert not supports_truecolour()
