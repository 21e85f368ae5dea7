import numpy as np
import pytest

from lmseg.errors import ParameterError
from lmseg.io import (
    RunMetadata,
    SegmentationParameters,
    load_image,
    load_labels,
    load_parameters,
    metadata_path,
    save_image,
    save_parameters,
)


def test_default_parameters():
    params = SegmentationParameters()
    assert params.min_size == 25
    assert params.max_size == 1000
    assert params.adaptive_increment is False
    assert params.threshold_increment == 1
    assert params.box_size == 25
    assert params.max_thresh_recursions == 3
    assert params.shrink_edge_windows is False


@pytest.mark.parametrize("overrides", [
    {"min_size": -1},
    {"min_size": 2000},
    {"threshold_increment": 0},
    {"max_size": 12.5},
    {"box_size": True},
    {"adaptive_increment": 1},
])
def test_invalid_parameters_are_rejected(overrides):
    with pytest.raises(ParameterError):
        SegmentationParameters(**overrides)


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ParameterError, match="diameter"):
        SegmentationParameters.from_dict({"diameter": 30})


def test_updated_ignores_none():
    params = SegmentationParameters()
    assert params.updated(min_size=None) is params
    changed = params.updated(min_size=5, box_size=None)
    assert changed.min_size == 5
    assert changed.box_size == 25
    assert params.min_size == 25
    with pytest.raises(ParameterError):
        params.updated(max_size=1)


def test_parameter_file_round_trip(tmp_path):
    params = SegmentationParameters(min_size=10, adaptive_increment=True)
    path = save_parameters(params, tmp_path / "params.yaml")
    assert load_parameters(path) == params


def test_parameter_file_takes_defaults_for_missing_keys(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text("max_size: 500\n")
    params = load_parameters(path)
    assert params.max_size == 500
    assert params.min_size == 25

    path.write_text("")
    assert load_parameters(path) == SegmentationParameters()


def test_parameter_file_must_hold_a_mapping(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ParameterError):
        load_parameters(path)


def test_run_metadata_round_trip(tmp_path):
    metadata = RunMetadata(command="segment", inputs=["image.tif"], output="labels.tif",
                           parameters={"min_size": 25})
    step = metadata.add_step("label", {"connectivity": 8}, input_data=["image.tif"])
    assert step.timestamp
    assert metadata.step_names == ["label"]

    path = metadata_path(tmp_path / "labels.tif")
    assert path.name == "labels.json"
    metadata.to_json(path)
    loaded = RunMetadata.from_json(path)
    assert loaded == metadata


@pytest.mark.parametrize("name", ["image.tif", "image.npy"])
def test_image_round_trip(tmp_path, name):
    data = np.arange(12, dtype=np.uint16).reshape(3, 4)
    path = save_image(tmp_path / "nested" / name, data)
    np.testing.assert_array_equal(load_image(path), data)


def test_labels_are_loaded_as_int64(tmp_path):
    labels = np.array([[0, 1], [2, 2]], dtype=np.int64)
    path = save_image(tmp_path / "labels.tif", labels)
    loaded = load_labels(path)
    assert loaded.dtype == np.int64
    np.testing.assert_array_equal(loaded, labels)


def test_image_io_errors(tmp_path):
    with pytest.raises(ValueError):
        load_image(tmp_path / "image.png")
    with pytest.raises(FileNotFoundError):
        load_image(tmp_path / "missing.tif")
    with pytest.raises(ValueError):
        save_image(tmp_path / "image.jpg", np.zeros((2, 2)))
