import numpy as np
import pytest
from PIL import Image

import quantise_image
from quantise.image_io import load_image
from quantise.palette import palette


@pytest.fixture
def colour_file(tmp_path, random_rgba):
    path = tmp_path / "photo.png"
    Image.fromarray(random_rgba[..., :3]).save(path)
    return path


def _run(*argv):
    return quantise_image.main([str(a) for a in argv])


def test_single_file_default_output(colour_file, capsys):
    assert _run(colour_file, "-c", 3, "--workers", 1) == 0
    out_path = colour_file.with_name("photo_q3.png")
    assert out_path.exists()
    grey = load_image(out_path)
    assert grey.shape == (24, 32)
    expected = palette(load_image(colour_file), 3)
    assert set(np.unique(grey).tolist()) <= set(expected)
    out = capsys.readouterr().out
    assert f"Palette (dense, M=3): {expected}" in out
    assert "Wrote photo_q3.png" in out


def test_input_output_flags(colour_file, tmp_path):
    dst = tmp_path / "nested.png"
    assert _run("-i", colour_file, "-o", dst, "-c", 2, "--strategy", "sparse") == 0
    assert dst.exists()


def test_print_palette_skips_writing(colour_file):
    assert _run(colour_file, "-c", 4, "--print-palette") == 0
    assert not colour_file.with_name("photo_q4.png").exists()


def test_folder_mode(tmp_path, random_rgba, two_clusters):
    Image.fromarray(random_rgba).save(tmp_path / "a.png")
    Image.fromarray(two_clusters).save(tmp_path / "b.png")
    Image.fromarray(two_clusters).save(tmp_path / "b_q2.png")  # earlier output
    (tmp_path / "readme.txt").write_text("skip me")
    outdir = tmp_path / "out"
    assert _run(tmp_path, "-c", 2, "--outdir", outdir, "--jobs", 2) == 0
    assert sorted(p.name for p in outdir.iterdir()) == ["a_q2.png", "b_q2.png"]
    np.testing.assert_array_equal(load_image(outdir / "b_q2.png"), two_clusters)


def test_folder_mode_sequential(tmp_path, two_clusters, capsys):
    Image.fromarray(two_clusters).save(tmp_path / "b.png")
    assert _run(tmp_path, "-c", 2, "--jobs", 1) == 0
    assert (tmp_path / "b_q2.png").exists()
    assert "Palette (dense, M=2): [10, 200]" in capsys.readouterr().out


def test_missing_input(tmp_path, capsys):
    assert _run(tmp_path / "nope.png", "-c", 2) == 2
    assert "not found" in capsys.readouterr().err


def test_bad_image_reports_error(tmp_path, capsys):
    bad = tmp_path / "broken.png"
    bad.write_text("garbage")
    assert _run(bad, "-c", 2) == 1
    assert "[error] broken.png" in capsys.readouterr().err


def test_too_many_levels_reports_error(colour_file, capsys):
    assert _run(colour_file, "-c", 300) == 1
    assert "level count must be <= 256" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [["-c", "0", "x.png"], ["x.png"], ["-c", "2"]])
def test_argument_errors_exit_2(argv):
    with pytest.raises(SystemExit) as info:
        quantise_image.main(argv)
    assert info.value.code == 2


def test_src_and_input_conflict(colour_file):
    with pytest.raises(SystemExit):
        quantise_image.main([str(colour_file), "-i", str(colour_file), "-c", "2"])


def test_folder_mode_skips_unreadable_images(tmp_path, two_clusters, capsys):
    Image.fromarray(two_clusters).save(tmp_path / "b.png")
    (tmp_path / "broken.png").write_text("garbage")
    assert _run(tmp_path, "-c", 2, "--jobs", 1) == 0
    assert (tmp_path / "b_q2.png").exists()
    assert not (tmp_path / "broken_q2.png").exists()
    assert "[warn] skipping unreadable image broken.png" in capsys.readouterr().out
