"""Runtime configuration loaded from an optional YAML file."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from actor_runner.models.model_spec import ModelSpec


logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.apify.com/v2"


class RunnerSettings(BaseModel):
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: float = 30.0
    memory_mbytes: int = 512
    poll_interval_seconds: float = 2.0
    max_wait_seconds: Optional[float] = None  # None polls until the run is terminal
    abort_on_stop: bool = False
    log_level: str = "INFO"
    model: ModelSpec = Field(default_factory=ModelSpec)


def load_settings(path: Path | None = None) -> RunnerSettings:
    if path is None:
        return RunnerSettings()
    if not path.exists():
        raise FileNotFoundError(path)
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        logger.warning("Config file %s is empty; using defaults", path)
        return RunnerSettings()
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping.")
    return RunnerSettings.model_validate(raw)


def resolve_api_key(model_spec: ModelSpec) -> str | None:
    """Read the completion service key once; callers pass it on explicitly."""
    api_key = os.environ.get(model_spec.api_key_env)
    if not api_key:
        logger.info("%s is not set; generated input fallback is disabled", model_spec.api_key_env)
        return None
    return api_key
