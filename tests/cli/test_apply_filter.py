import numpy as np
import pytest
from PIL import Image

from pymeandiff.cli.apply_filter import main, run_filter
from pymeandiff.core import apply_difference_of_mean, open_image


@pytest.fixture
def gray_file(tmp_path):
    rng = np.random.default_rng(20)
    arr = rng.integers(0, 256, size=(16, 12), dtype=np.uint8)
    path = tmp_path / "in.png"
    Image.fromarray(arr).save(path)
    return path, arr


def test_run_filter_writes_result(tmp_path, gray_file):
    path, arr = gray_file
    out = tmp_path / "nested" / "out.png"

    assert run_filter(path, out, (3, 2), (1, 1), quiet=True) is True

    assert np.array_equal(open_image(out), apply_difference_of_mean(arr, (3, 2), (1, 1)))


def test_run_filter_reports_unsupported_image(tmp_path, capsys):
    path = tmp_path / "wide.tif"
    Image.fromarray(np.array([[70000, 1]], dtype=np.int32)).save(path)

    assert run_filter(path, tmp_path / "out.tif", quiet=True) is False
    assert "not yet supported" in capsys.readouterr().err


def test_run_filter_missing_input(tmp_path, capsys):
    assert run_filter(tmp_path / "nope.png", tmp_path / "out.png") is False
    assert "Error filtering" in capsys.readouterr().err


def test_main_exit_codes(tmp_path, gray_file):
    path, _ = gray_file
    out = tmp_path / "out.png"

    with pytest.raises(SystemExit) as e:
        main([str(path), str(out), "--radius", "2", "2", "--quiet"])
    assert e.value.code == 0
    assert out.exists()

    with pytest.raises(SystemExit) as e:
        main([str(tmp_path / "missing.png"), str(out), "--quiet"])
    assert e.value.code == 1


def test_main_help():
    with pytest.raises(SystemExit) as e:
        main(["--help"])
    assert e.value.code == 0
