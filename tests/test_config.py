import json

import numpy as np
import pytest

from pyopticsof.config import OPTICSOFConfig, load_config, load_optics_of_config
from pyopticsof.errors import ConfigurationError


def test_config_defaults():
    config = OPTICSOFConfig(min_pts=5)
    assert config.backend == "brute"
    assert config.metric == "euclidean"
    assert config.n_jobs == 1
    assert config.contamination == pytest.approx(0.1)


@pytest.mark.parametrize("min_pts", [1, 0, -3, 2.5, "3", True, None])
def test_config_rejects_invalid_min_pts(min_pts):
    with pytest.raises(ConfigurationError, match="min_pts"):
        OPTICSOFConfig(min_pts=min_pts)


def test_config_stores_metric_names_lowercase():
    config = OPTICSOFConfig(min_pts=3, backend="faiss", metric="L2")
    assert config.metric == "l2"
    assert OPTICSOFConfig(min_pts=3, metric="Cityblock").metric == "cityblock"


def test_config_accepts_numpy_integers():
    config = OPTICSOFConfig(min_pts=np.int64(4))
    assert config.min_pts == 4
    assert type(config.min_pts) is int


def test_config_validates_other_fields():
    with pytest.raises(ConfigurationError, match="backend"):
        OPTICSOFConfig(min_pts=3, backend="annoy")
    with pytest.raises(ConfigurationError, match="euclidean"):
        OPTICSOFConfig(min_pts=3, backend="faiss", metric="cosine")
    with pytest.raises(ConfigurationError, match="n_jobs"):
        OPTICSOFConfig(min_pts=3, n_jobs=0)
    with pytest.raises(ConfigurationError, match="contamination"):
        OPTICSOFConfig(min_pts=3, contamination=0.0)
    with pytest.raises(ConfigurationError, match="contamination"):
        OPTICSOFConfig(min_pts=3, contamination="a lot")


def test_config_is_frozen():
    config = OPTICSOFConfig(min_pts=3)
    with pytest.raises(AttributeError):
        config.min_pts = 10  # type: ignore[misc]


def test_config_from_dict_checks_keys():
    assert OPTICSOFConfig.from_dict({"min_pts": 4, "backend": "SKLEARN"}).backend == "sklearn"

    with pytest.raises(ConfigurationError, match="Unknown config keys"):
        OPTICSOFConfig.from_dict({"min_pts": 4, "k": 3})
    with pytest.raises(ConfigurationError, match="required"):
        OPTICSOFConfig.from_dict({"backend": "brute"})


def test_load_config_json(tmp_path):
    config_path = tmp_path / "cfg.json"
    payload = {"a": 1, "b": {"c": [1, 2, 3]}, "d": True, "e": None}
    config_path.write_text(json.dumps(payload), encoding="utf-8")

    assert load_config(config_path) == payload


def test_load_config_unknown_extension_raises(tmp_path):
    config_path = tmp_path / "cfg.txt"
    config_path.write_text("x", encoding="utf-8")

    with pytest.raises(ConfigurationError) as exc:
        load_config(config_path)

    assert ".txt" in str(exc.value)


def test_load_config_top_level_must_be_object(tmp_path):
    config_path = tmp_path / "cfg.json"
    config_path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="top level"):
        load_config(config_path)


def test_load_config_yaml_optional(tmp_path):
    config_path = tmp_path / "cfg.yaml"
    config_path.write_text("optics_of:\n  min_pts: 7\n  backend: sklearn\n", encoding="utf-8")

    try:
        import yaml  # noqa: F401
    except Exception:
        with pytest.raises(ImportError) as exc:
            load_config(config_path)
        msg = str(exc.value)
        assert "PyYAML" in msg
        assert "pip install" in msg
    else:
        config = load_optics_of_config(config_path)
        assert config.min_pts == 7
        assert config.backend == "sklearn"


def test_load_optics_of_config_section_and_overrides(tmp_path):
    config_path = tmp_path / "cfg.json"
    config_path.write_text(
        json.dumps({"optics_of": {"min_pts": 8, "n_jobs": 2}, "unrelated": {"x": 1}}),
        encoding="utf-8",
    )

    config = load_optics_of_config(config_path)
    assert config.min_pts == 8
    assert config.n_jobs == 2

    overridden = load_optics_of_config(config_path, overrides={"min_pts": 3, "n_jobs": None})
    assert overridden.min_pts == 3
    assert overridden.n_jobs == 2


def test_load_optics_of_config_top_level(tmp_path):
    config_path = tmp_path / "cfg.json"
    config_path.write_text(json.dumps({"min_pts": 4, "metric": "cityblock"}), encoding="utf-8")

    config = load_optics_of_config(config_path)
    assert config.min_pts == 4
    assert config.metric == "cityblock"


def test_load_optics_of_config_rejects_invalid_min_pts(tmp_path):
    config_path = tmp_path / "cfg.json"
    config_path.write_text(json.dumps({"optics_of": {"min_pts": 1}}), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_optics_of_config(config_path)
