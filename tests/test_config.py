"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from core.config import DEFAULT_ROOT, load_config, load_yaml, merge_dicts


def write_config(root: Path, name: str, text: str) -> None:
    config_dir = root / "config"
    config_dir.mkdir(exist_ok=True)
    (config_dir / name).write_text(text, encoding="utf-8")


def test_load_yaml_missing_file_is_empty(tmp_path: Path) -> None:
    assert load_yaml(tmp_path / "nope.yaml") == {}


def test_load_yaml_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(path)


def test_merge_dicts_is_recursive() -> None:
    merged = merge_dicts({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}


def test_repository_defaults() -> None:
    config = load_config(DEFAULT_ROOT)
    assert config.max_trajectories == 5000
    assert config.distillation_threshold == 0.6
    assert config.retrieval_k == 3
    assert config.mmr_lambda == 0.7
    assert config.dedup_threshold == 0.95
    assert config.namespace == "reasoning-bank"
    assert config.vector_index.backend == "none"


def test_local_yaml_and_overrides_layer_on_defaults(tmp_path: Path) -> None:
    write_config(
        tmp_path,
        "default.yaml",
        "reasoning_bank:\n  retrieval_k: 4\n  mmr_lambda: 0.6\n"
        "vector_index:\n  backend: http\n  url: http://a.test\n",
    )
    write_config(
        tmp_path,
        "local.yaml",
        "reasoning_bank:\n  retrieval_k: 7\nvector_index:\n  url: http://b.test\n",
    )

    config = load_config(tmp_path, overrides={"mmr_lambda": 0.2})

    assert config.retrieval_k == 7
    assert config.mmr_lambda == 0.2
    assert config.vector_index.backend == "http"
    assert config.vector_index.url == "http://b.test"


def test_empty_root_uses_model_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config.vector_dimension == 768
    assert config.enable_contradiction_detection is True


def test_out_of_range_values_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        load_config(tmp_path, overrides={"mmr_lambda": 1.5})
    with pytest.raises(ValidationError):
        load_config(tmp_path, overrides={"vector_index": {"backend": "faiss"}})
