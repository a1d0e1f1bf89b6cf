"""Tests for the command-line entry points."""

import pytest
from PIL import Image

from filmstamp.cli import inspect_main, main


def test_main_stamps_and_saves(make_photo, tmp_path, capsys):
    source = make_photo("2025:01:02 03:04:05")
    output = tmp_path / "stamped.jpg"

    assert main([str(source), "-o", str(output)]) == 0

    out = capsys.readouterr().out
    assert f"Processing file: {source}" in out
    assert f"Image saved to: {output}" in out
    with Image.open(output) as img:
        assert img.size == (400, 300)


def test_main_long_output_flag(make_photo, tmp_path):
    output = tmp_path / "stamped.png"
    assert main([str(make_photo()), "--output", str(output)]) == 0
    assert output.exists()


def test_main_requires_output(make_photo):
    with pytest.raises(SystemExit) as exc:
        main([str(make_photo())])
    assert exc.value.code == 2


def test_main_failure_exits_nonzero_without_output(make_photo, tmp_path, capsys):
    output = tmp_path / "stamped.jpg"
    code = main([str(make_photo("not:a:date xx:xx:xx")), "-o", str(output)])

    assert code == 1
    assert not output.exists()
    err = capsys.readouterr().err
    assert "Error extracting timestamp from EXIF data of image" in err


def test_inspect_prints_timestamp(make_photo, capsys):
    assert inspect_main([str(make_photo("2024:02:29 18:05:00"))]) == 0
    assert capsys.readouterr().out.strip() == "29  2  2024   18:5"


def test_inspect_writes_nothing(make_photo, tmp_path):
    source = make_photo()
    before = sorted(tmp_path.iterdir())
    inspect_main([str(source)])
    assert sorted(tmp_path.iterdir()) == before


def test_inspect_has_no_output_option(make_photo, tmp_path):
    with pytest.raises(SystemExit) as exc:
        inspect_main([str(make_photo()), "-o", str(tmp_path / "out.jpg")])
    assert exc.value.code == 2


def test_inspect_missing_tag_reports_error(make_photo, capsys):
    code = inspect_main([str(make_photo(value=None))])
    captured = capsys.readouterr()
    assert code == 1
    assert captured.out == ""
    assert "No EXIF metadata found" in captured.err


def test_inspect_missing_file(tmp_path, capsys):
    assert inspect_main([str(tmp_path / "missing.jpg")]) == 1
    assert "Failed to load image" in capsys.readouterr().err


def test_verbose_flag_accepted(make_photo, capsys):
    assert inspect_main([str(make_photo()), "--verbose"]) == 0
