import io
import random

import pytest

from labkit import kernels
from labkit.kernels import Pixel
from labkit.perfdriver import (
    ODD_DIM,
    Benchmark,
    BenchmarkRegistry,
    check_average,
    check_rotate,
    check_smooth,
    create_image,
    geometric_mean,
    main,
    measure_rotate,
    measure_smooth,
)


def _image(dim):
    return [Pixel(k, 2 * k, 3 * k) for k in range(dim * dim)]


def test_registry_keeps_order_and_starts_invalid():
    registry = BenchmarkRegistry()
    kernels.register_rotate_functions(registry)
    kernels.register_smooth_functions(registry)
    assert [b.description for b in registry.rotate] == [
        kernels.NAIVE_ROTATE_DESCR,
        kernels.ROTATE_DESCR,
    ]
    assert [b.description for b in registry.smooth] == [
        kernels.SMOOTH_DESCR,
        kernels.NAIVE_SMOOTH_DESCR,
    ]
    assert not any(b.valid for b in registry.rotate + registry.smooth)


def test_registry_limit():
    registry = BenchmarkRegistry()
    for k in range(100):
        registry.add_rotate(kernels.rotate, f"r{k}")
    with pytest.raises(ValueError):
        registry.add_rotate(kernels.rotate, "one too many")
    assert len(registry.rotate) == 100


def test_create_image_shapes_and_copy():
    images = create_image(5, random.Random(7))
    assert len(images.orig) == 25
    assert images.copy == images.orig
    assert images.result == [Pixel(0, 0, 0)] * 25


def test_create_image_is_reproducible():
    first = create_image(4, random.Random(3))
    second = create_image(4, random.Random(3))
    assert first.orig == second.orig


def test_check_average_uniform_image():
    src = [Pixel(10, 20, 30)] * 16
    for i, j in [(0, 0), (1, 2), (3, 3)]:
        assert check_average(4, i, j, src) == Pixel(10, 20, 30)


def test_check_average_matches_kernel_avg():
    src = create_image(6, random.Random(1)).orig
    for i in range(6):
        for j in range(6):
            assert check_average(6, i, j, src) == kernels.avg(6, i, j, src)


def test_check_rotate_accepts_rotation():
    src = _image(4)
    dst = [Pixel(0, 0, 0)] * 16
    kernels.naive_rotate(4, src, dst)
    out = io.StringIO()
    assert check_rotate(4, src, dst, out) == 0
    assert out.getvalue() == ""


def test_check_rotate_reports_errors():
    src = [Pixel(1, 2, 3)] * 9
    dst = [Pixel(0, 0, 0)] * 9
    out = io.StringIO()
    assert check_rotate(3, src, dst, out) == 3 * 3
    text = out.getvalue()
    assert "ERROR: Dimension=3" in text
    assert "src[2][2].{red,green,blue} = {1,2,3}" in text


def test_check_smooth_accepts_smoothing():
    src = _image(5)
    dst = [Pixel(0, 0, 0)] * 25
    kernels.naive_smooth(5, src, dst)
    assert check_smooth(5, src, dst, io.StringIO()) == 0


def test_check_smooth_rejects_copy():
    src = _image(5)
    out = io.StringIO()
    assert check_smooth(5, src, list(src), out) > 0
    assert "It should be dst[" in out.getvalue()


def test_geometric_mean():
    assert geometric_mean([2.0, 8.0]) == pytest.approx(4.0)
    assert geometric_mean([3.5] * 5) == pytest.approx(3.5)


@pytest.mark.parametrize("values", [[], [1.0, 0.0], [2.0, -1.0]])
def test_geometric_mean_rejects_bad_values(values):
    with pytest.raises(ValueError):
        geometric_mean(values)


def test_measure_rotate_wrong_kernel():
    bench = Benchmark(lambda dim, src, dst: None, "does nothing")
    out = io.StringIO()
    assert measure_rotate(bench, random.Random(1), None, out) is None
    assert (
        f'Benchmark "does nothing" failed correctness check for dimension {ODD_DIM}.'
        in out.getvalue()
    )
    assert bench.cpes == []


def test_measure_smooth_detects_changed_original():
    def vandal(dim, src, dst):
        src[0] = Pixel(1, 1, 1) if src[0] != Pixel(1, 1, 1) else Pixel(2, 2, 2)

    bench = Benchmark(vandal, "vandal")
    out = io.StringIO()
    assert measure_smooth(bench, random.Random(1), None, out) is None
    assert "Error: Original image has been changed!" in out.getvalue()


def test_main_dump_and_quit(tmp_path):
    dump = tmp_path / "funcs.txt"
    assert main(["-q", "-d", str(dump)]) == 0
    assert dump.read_text().splitlines() == [
        "R:" + kernels.NAIVE_ROTATE_DESCR,
        "R:" + kernels.ROTATE_DESCR,
        "S:" + kernels.SMOOTH_DESCR,
        "S:" + kernels.NAIVE_SMOOTH_DESCR,
    ]


def test_main_requires_team(capsys):
    assert main([]) == 1
    assert "Please fill in the team struct" in capsys.readouterr().out


def test_main_bad_option(capsys):
    assert main(["-x"]) == 1
    assert "Usage:" in capsys.readouterr().err


def test_main_missing_function_file(tmp_path, capsys):
    missing = tmp_path / "absent.txt"
    assert main(["-t", "-f", str(missing)]) == -5
    assert f"Can't open file {missing}" in capsys.readouterr().out


def test_main_function_file_selects_nothing(tmp_path, capsys):
    funcs = tmp_path / "funcs.txt"
    funcs.write_text("R:no such kernel\nS:another missing one\n")
    assert main(["-t", "-f", str(funcs)]) == 0
    out = capsys.readouterr().out
    assert "Summary of Your Best Scores:" in out
    assert "  Rotate: 0.0 ((null))" in out
    assert "  Smooth: 0.0 ((null))" in out