"""Configuration loading for the reasoning bank."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

DEFAULT_ROOT = Path(__file__).resolve().parents[1]


class VectorIndexConfig(BaseModel):
    """Settings for the optional external vector index."""

    backend: Literal["none", "memory", "http"] = "none"
    url: str = "http://127.0.0.1:8765"
    timeout: float = Field(default=5.0, gt=0)


class ReasoningBankConfig(BaseModel):
    """Tunable thresholds and capacities for the learning pipeline."""

    max_trajectories: int = Field(default=5000, ge=1)
    distillation_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    retrieval_k: int = Field(default=3, ge=1)
    mmr_lambda: float = Field(default=0.7, ge=0.0, le=1.0)
    max_pattern_age_days: float = Field(default=30, ge=0)
    dedup_threshold: float = Field(default=0.95, ge=0.0, le=1.0)
    enable_contradiction_detection: bool = True
    shard_consolidation_by_domain: bool = False
    vector_dimension: int = Field(default=768, ge=1)
    namespace: str = "reasoning-bank"
    enable_external_index: bool = True
    vector_index: VectorIndexConfig = Field(default_factory=VectorIndexConfig)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML from file, returning empty mapping when missing."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge dictionaries."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_effective_config(root: Path | None = None) -> dict[str, Any]:
    """Load default.yaml with local.yaml layered on top."""
    config_dir = (root or DEFAULT_ROOT) / "config"
    default_cfg = load_yaml(config_dir / "default.yaml")
    local_cfg = load_yaml(config_dir / "local.yaml")
    return merge_dicts(default_cfg, local_cfg)


def load_config(
    root: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ReasoningBankConfig:
    """Build a validated config from YAML files plus explicit overrides."""
    raw = load_effective_config(root)
    section = dict(raw.get("reasoning_bank", {}))
    if "vector_index" in raw:
        section["vector_index"] = merge_dicts(
            dict(raw["vector_index"]), dict(section.get("vector_index", {}))
        )
    merged = merge_dicts(section, overrides or {})
    return ReasoningBankConfig.model_validate(merged)
