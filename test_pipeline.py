"""
Tests for parameter handling, the pipeline and the command line entry point.
"""

import json
import logging

import numpy as np
import pytest

from heightmesh.config import (
    DEFAULT_NOISE, TERRAIN_PARAMETERS, ParameterSpec, load_parameters, resolve_parameters
)
from heightmesh.errors import InvalidArgumentError
from heightmesh.generate import main
from heightmesh.logging_config import setup_logging
from heightmesh.pipeline import TerrainPipeline

SMALL = {
    "subdivision_width": 6,
    "subdivision_height": 4,
    "width": 3.0,
    "height": 2.0,
    "image_width": 12,
    "image_height": 8,
    "divider": 4.0,
    "num_layers": 3,
    "seed": 7,
    "noise": "value",
}


@pytest.fixture(autouse=True)
def reset_package_logger():
    # CLI runs bind handlers to the captured streams of the current test
    yield
    logger = logging.getLogger("heightmesh")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_defaults_match_reference_terrain():
    params = resolve_parameters()

    assert params["subdivision_width"] == 128
    assert params["subdivision_height"] == 128
    assert params["width"] == 10.0
    assert params["height"] == 10.0
    assert params["image_width"] == 128
    assert params["image_height"] == 128
    assert params["divider"] == 128.0
    assert params["num_layers"] == 5
    assert params["seed"] == 1564863213
    assert params["noise"] == DEFAULT_NOISE


def test_integral_floats_are_coerced():
    params = resolve_parameters({"subdivision_width": 16.0, "width": 4})
    assert params["subdivision_width"] == 16
    assert isinstance(params["subdivision_width"], int)
    assert isinstance(params["width"], float)


@pytest.mark.parametrize("values,parameter", [
    ({"subdivision_width": 0}, "subdivision_width"),
    ({"image_height": 1.5}, "image_height"),
    ({"divider": 0.0}, "divider"),
    ({"num_layers": True}, "num_layers"),
    ({"seed": -1}, "seed"),
    ({"width": "wide"}, "width"),
    ({"octaves": 4}, "octaves"),
    ({"noise": "perlin"}, "noise"),
])
def test_invalid_parameters(values, parameter):
    with pytest.raises(InvalidArgumentError) as excinfo:
        resolve_parameters(values)
    assert excinfo.value.parameter == parameter


def test_parameter_spec_validate():
    spec = ParameterSpec({"a": (0, 10, 5), "b": (1, 2, 1.5)}, integer_params=("a",))

    assert spec.is_valid({"a": 3, "b": 1.2})
    assert not spec.is_valid({"a": 3})
    assert not spec.is_valid({"a": 11, "b": 1.2})
    assert spec.extract_params({}) == {"a": 5, "b": 1.5}
    assert spec.get_param_ranges() == {"a": (0, 10), "b": (1, 2)}
    assert spec.get_param_names() == ["a", "b"]

    with pytest.raises(InvalidArgumentError):
        spec.validate({"a": 1, "b": 1.0, "c": 0})


def test_load_parameters(tmp_path):
    path = tmp_path / "params.json"
    path.write_text(json.dumps({"seed": 3, "num_layers": 2}))
    assert load_parameters(path) == {"seed": 3, "num_layers": 2}

    path.write_text("[1, 2]")
    with pytest.raises(InvalidArgumentError):
        load_parameters(path)

    path.write_text("{not json")
    with pytest.raises(InvalidArgumentError):
        load_parameters(path)

    with pytest.raises(InvalidArgumentError):
        load_parameters(tmp_path / "absent.json")


def test_pipeline_builds_displaced_mesh():
    pipeline = TerrainPipeline(SMALL)
    mesh = pipeline.build_mesh()

    assert mesh.num_vertices == 7 * 5
    assert mesh.num_faces == 24
    assert mesh.vertices[:, 1].min() >= -1.0
    assert mesh.vertices[:, 1].max() <= 1.0
    assert np.allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)


def test_pipeline_is_deterministic():
    a = TerrainPipeline(SMALL).build_mesh()
    b = TerrainPipeline(SMALL).build_mesh()
    assert np.array_equal(a.vertices, b.vertices)
    assert np.array_equal(a.normals, b.normals)


def test_pipeline_run_writes_files(tmp_path):
    obj_path = tmp_path / "terrain.obj"
    png_path = tmp_path / "terrain.png"

    mesh = TerrainPipeline(SMALL, normals_mode="smooth").run(obj_path, heightmap_png=png_path)

    lines = obj_path.read_text().splitlines()
    assert sum(1 for line in lines if line.startswith("v ")) == mesh.num_vertices
    assert sum(1 for line in lines if line.startswith("f ")) == mesh.num_faces
    assert png_path.exists()


def test_cli_end_to_end(tmp_path, capsys):
    obj_path = tmp_path / "cli.obj"
    png_path = tmp_path / "cli.png"

    code = main([
        "--output", str(obj_path),
        "--heightmap-png", str(png_path),
        "--subdivision-width", "4",
        "--subdivision-height", "3",
        "--image-width", "8",
        "--image-height", "8",
        "--divider", "4",
        "--num-layers", "2",
        "--noise", "value",
    ])

    assert code == 0
    lines = obj_path.read_text().splitlines()
    assert sum(1 for line in lines if line.startswith("v ")) == 20
    assert sum(1 for line in lines if line.startswith("vt ")) == 20
    assert sum(1 for line in lines if line.startswith("vn ")) == 20
    assert sum(1 for line in lines if line.startswith("f ")) == 12
    assert png_path.exists()
    assert "Vertices: 20 Faces: 12" in capsys.readouterr().out


def test_cli_config_file_and_override(tmp_path):
    config_path = tmp_path / "params.json"
    config_path.write_text(json.dumps(dict(SMALL, subdivision_width=2, subdivision_height=2)))
    obj_path = tmp_path / "config.obj"

    code = main(["--config", str(config_path), "--subdivision-width", "3", "--output", str(obj_path)])

    assert code == 0
    faces = [line for line in obj_path.read_text().splitlines() if line.startswith("f ")]
    assert len(faces) == 6


def test_cli_rejects_invalid_arguments(tmp_path, capsys):
    code = main(["--subdivision-width", "0", "--output", str(tmp_path / "bad.obj")])

    assert code == 1
    assert "subdivision_width" in capsys.readouterr().err
    assert not (tmp_path / "bad.obj").exists()


def test_cli_reports_export_failure(tmp_path, capsys):
    code = main([
        "--output", str(tmp_path / "missing" / "mesh.obj"),
        "--subdivision-width", "2", "--subdivision-height", "2",
        "--image-width", "4", "--image-height", "4",
        "--noise", "value",
    ])

    assert code == 1
    assert "export_obj failed" in capsys.readouterr().err


def test_cli_small_extent(tmp_path, capsys):
    obj_path = tmp_path / "tiny.obj"

    code = main([
        "--output", str(obj_path),
        "--width", "1e-4", "--height", "1e-4",
        "--image-width", "8", "--image-height", "8",
        "--num-layers", "2",
        "--noise", "value",
    ])

    assert code == 0
    assert "Vertices: 16641 Faces: 16384" in capsys.readouterr().out


def test_setup_logging_replaces_handlers(tmp_path):
    log_file = tmp_path / "run.log"

    setup_logging(logging.INFO)
    logger = setup_logging(logging.DEBUG, str(log_file))
    assert len(logger.handlers) == 2

    logging.getLogger("heightmesh.engine").debug("octave detail")
    for handler in logger.handlers:
        handler.flush()
    text = log_file.read_text()
    assert "heightmesh.engine - DEBUG - octave detail" in text

    logger = setup_logging(logging.WARNING)
    assert len(logger.handlers) == 1


def test_console_logging_goes_to_stderr(capsys):
    setup_logging(logging.INFO)
    logging.getLogger("heightmesh.pipeline").info("building mesh")

    captured = capsys.readouterr()
    assert "INFO heightmesh.pipeline: building mesh" in captured.err
    assert captured.out == ""


def test_parameter_names_cover_cli_flags():
    assert set(TERRAIN_PARAMETERS.get_param_names()) == {
        "subdivision_width", "subdivision_height", "width", "height",
        "image_width", "image_height", "divider", "num_layers", "seed",
    }


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
