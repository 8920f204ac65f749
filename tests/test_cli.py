import struct

import pytest

from darkweave.cli import change_rate, main


def write_weights(path, rate, tail=b"rest-of-file"):
    path.write_bytes(struct.pack("=f", rate) + tail)


def read_rate(path):
    return struct.unpack("=f", path.read_bytes()[:4])[0]


def test_change_rate_scales_and_keeps_tail(tmp_path):
    path = tmp_path / "net.weights"
    write_weights(path, 0.5)
    new = change_rate(str(path), 4.0, 0.0)
    assert new == pytest.approx(2.0)
    assert read_rate(path) == pytest.approx(2.0)
    assert path.read_bytes()[4:] == b"rest-of-file"


def test_change_rate_prints_message(tmp_path, capsys):
    path = tmp_path / "net.weights"
    write_weights(path, 0.5)
    change_rate(str(path), 2.0, 0.5)
    assert "Scaling learning rate from" in capsys.readouterr().out
    assert read_rate(path) == pytest.approx(1.5)


def test_change_rate_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        change_rate(str(tmp_path / "absent.weights"), 1.0, 0.0)


def test_main_change(tmp_path):
    path = tmp_path / "net.weights"
    write_weights(path, 0.25)
    assert main(["change", str(path), "2", "1"]) == 0
    assert read_rate(path) == pytest.approx(1.5)


def test_main_change_default_add(tmp_path):
    path = tmp_path / "net.weights"
    write_weights(path, 0.25)
    assert main(["change", str(path), "4"]) == 0
    assert read_rate(path) == pytest.approx(1.0)


def test_main_change_missing_arguments(tmp_path):
    path = tmp_path / "net.weights"
    write_weights(path, 0.25)
    assert main(["change", str(path)]) == 1
    assert read_rate(path) == pytest.approx(0.25)


def test_main_change_missing_file(tmp_path, capsys):
    assert main(["change", str(tmp_path / "none"), "2"]) == 1
    assert "Couldn't open file" in capsys.readouterr().err


def test_main_no_arguments_prints_usage(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().err


def test_main_unknown_command(capsys):
    assert main(["bogus"]) == 0
    assert "Not an option: bogus" in capsys.readouterr().err