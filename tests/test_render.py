import os

import imageio.v3 as iio
import pandas as pd
import pytest

from turtlecanvas.config import GraphicsConfig
from turtlecanvas.logging_config import setup_logging
from turtlecanvas.render import main, render_from_csv, render_program


@pytest.fixture
def small_config():
    return GraphicsConfig(width=100, height=100)


def test_render_program_draws_in_world_coordinates():
    image = render_program("(fd 100)")
    assert image.shape == (400, 400, 3)
    # world (50, 0) is pixel (250, 200)
    assert image[200, 250].sum() < 0.3
    assert image[100, 100] == pytest.approx([1.0, 1.0, 1.0])


def test_render_program_forces_a_raster_surface(small_config):
    config = GraphicsConfig(width=100, height=100, surface="recording")
    assert render_program("(pu)", config).shape == (100, 100, 3)


def test_render_program_turtle_layer_is_optional(small_config):
    plain = render_program("(pu)", small_config)
    with_turtle = render_program("(pu)", small_config, include_turtle=True)
    assert (plain == 1.0).all()
    assert (with_turtle < 1.0).any()


def test_render_program_background(small_config):
    image = render_program("(bgcolor black)", small_config)
    assert (image == 0.0).all()


def test_render_from_csv(tmp_path, monkeypatch, small_config):
    monkeypatch.chdir(tmp_path)
    os.makedirs("output")
    pd.DataFrame({"program_string": ["(repeat 4 (fd 20) (lt 90))", "(spin 2)", "(fd"]}).to_csv(
        os.path.join("output", "shapes.csv"), index=False)

    df = render_from_csv("shapes", small_config)

    assert df["render_filepath"].tolist() == [os.path.join("output", "shapes", "images", "0.png"), "", ""]
    assert iio.imread(df["render_filepath"][0]).shape[:2] == (100, 100)
    assert os.path.exists(os.path.join("output", "shapes", "rendered.csv"))


def test_render_from_csv_missing_inputs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        render_from_csv("missing")
    os.makedirs("output")
    pd.DataFrame({"code": ["(fd 1)"]}).to_csv(os.path.join("output", "other.csv"), index=False)
    with pytest.raises(KeyError):
        render_from_csv("other")


def test_cli_single(tmp_path):
    out = tmp_path / "img" / "square.png"
    main(["--set", "width=64", "--set", "height=48", "--log-level", "WARNING",
          "single", "(repeat 4 (fd 10) (rt 90))", str(out)])
    assert iio.imread(out).shape[:2] == (48, 64)


def test_cli_log_file(tmp_path):
    out = tmp_path / "dot.png"
    log_file = tmp_path / "render.log"
    main(["--set", "width=32", "--set", "height=32", "--log-level", "DEBUG",
          "--log-file", str(log_file), "single", "(dot 5)", str(out)])
    setup_logging("WARNING")
    assert out.exists()
    assert "Logging initialized." in log_file.read_text(encoding="utf-8")
