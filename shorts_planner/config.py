from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from shorts_planner.errors import ConfigurationMissing

DEFAULT_MODEL = "gpt-4.1"
DEFAULT_FAST_MODEL = "gpt-4.1-mini"


@dataclass(frozen=True)
class Settings:
    topic_model: str = DEFAULT_MODEL
    topic_max_tokens: int = 8000
    topic_temperature: float = 0.7

    script_model: str = DEFAULT_MODEL
    script_max_tokens: int = 2000
    script_temperature: float = 0.7

    batch_plan_model: str = DEFAULT_FAST_MODEL
    batch_plan_max_tokens: int = 4000
    batch_plan_temperature: float = 0.5

    # Titles more similar than this (Levenshtein ratio) count as duplicates.
    similarity_threshold: float = 0.80
    prior_topics_limit: int = 20
    cluster_size: int = 3
    tone_mix_tolerance: float = 1.0


_ENV_OVERRIDES: dict[str, str] = {
    "SHORTS_TOPIC_MODEL": "topic_model",
    "SHORTS_SCRIPT_MODEL": "script_model",
    "SHORTS_BATCH_PLAN_MODEL": "batch_plan_model",
    "SHORTS_SIMILARITY_THRESHOLD": "similarity_threshold",
}


def _coerce(name: str, value: Any) -> Any:
    default = getattr(Settings(), name)
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


def _read_overrides_file(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings YAML root must be a mapping: {p}")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings in {p}: {unknown}")
    return data


def load_settings(path: str | Path | None = None) -> Settings:
    """Build settings from defaults, then environment (.env included), then an optional YAML file."""
    load_dotenv()

    values: dict[str, Any] = {}

    base_model = os.environ.get("OPENAI_MODEL", "").strip()
    if base_model:
        values["topic_model"] = base_model
        values["script_model"] = base_model

    for env_name, field_name in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name, "").strip()
        if raw:
            values[field_name] = _coerce(field_name, raw)

    if path is not None:
        for k, v in _read_overrides_file(path).items():
            values[k] = _coerce(k, v)

    settings = replace(Settings(), **values)
    if not 0.0 < settings.similarity_threshold <= 1.0:
        raise ValueError("similarity_threshold must be in (0, 1]")
    return settings


def require_api_key(env_name: str = "OPENAI_API_KEY") -> str:
    key = os.environ.get(env_name, "").strip()
    if not key:
        raise ConfigurationMissing(f"{env_name} is not set. Add it to your environment or .env file.")
    return key
