import numpy as np
import pytest
from PIL import Image

import main


def test_pipeline_writes_all_outputs(tmp_path, capsys):
    color = tmp_path / "terrain.bmp"
    gray = tmp_path / "gray.png"
    raw = tmp_path / "heights.npy"

    heightmap = main.main(
        [
            "--width", "24",
            "--height", "16",
            "--scale", "0.08",
            "--octaves", "3",
            "--seed", "36",
            "--output", str(color),
            "--grayscale", str(gray),
            "--raw", str(raw),
        ]
    )

    assert heightmap.shape == (16, 24)
    with Image.open(color) as img:
        assert img.size == (24, 16)
    assert gray.exists()
    assert np.array_equal(np.load(raw), heightmap)
    assert "Saved terrain image" in capsys.readouterr().out


def test_pipeline_is_reproducible(tmp_path):
    args = ["--width", "10", "--height", "10", "--scale", "0.1", "--seed", "9"]
    a = main.main(args + ["--output", str(tmp_path / "a.bmp")])
    b = main.main(args + ["--output", str(tmp_path / "b.bmp")])
    assert a.tobytes() == b.tobytes()
    assert (tmp_path / "a.bmp").read_bytes() == (tmp_path / "b.bmp").read_bytes()


def test_defaults_follow_reference_terrain():
    args = main.build_parser().parse_args([])
    assert (args.width, args.height) == (512, 512)
    assert args.scale == 0.01
    assert args.octaves == 4
    assert args.persistence == 0.5
    assert args.lacunarity == 2.0
    assert args.seed is None
    assert args.output == "terrain.bmp"


@pytest.mark.parametrize(
    "bad",
    [["--width", "0"], ["--octaves", "-2"], ["--scale", "nan"], ["--seed", "-1"]],
)
def test_bad_configuration_exits(tmp_path, bad, capsys):
    with pytest.raises(SystemExit) as exc:
        main.main(bad + ["--output", str(tmp_path / "x.bmp")])
    assert exc.value.code == 2
    assert "error" in capsys.readouterr().err
    assert not (tmp_path / "x.bmp").exists()
