from __future__ import annotations

import os
from typing import Literal, Optional

import yaml
from pydantic import BaseModel


class EngineConfig(BaseModel):
    """Policies the engine applies to failures and context merges."""

    # which failed parallel member is re-raised: first in declaration order
    # or first to fail on the clock
    parallel_failure: Literal["declared", "chronological"] = "declared"
    # whether a failing compensator stops the rest of the rollback
    compensation_failures: Literal["collect", "abort"] = "collect"
    # which side keeps a key when a nested workflow's context is merged back
    nested_merge: Literal["child", "parent"] = "child"


class RecorderConfig(BaseModel):
    """Execution recorder settings."""

    backend: Literal["inmemory", "none"] = "inmemory"
    max_runs: int = 1000


class SagaflowConfig(BaseModel):
    """Top-level configuration model."""

    engine: EngineConfig = EngineConfig()
    recorder: RecorderConfig = RecorderConfig()


def load_config(path: Optional[str] = None) -> SagaflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to SAGAFLOW_CONFIG env
            variable or 'sagaflow.yaml' in the current directory.
    """

    config_path = path or os.getenv("SAGAFLOW_CONFIG", "sagaflow.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = SagaflowConfig(**data)
    else:
        config = SagaflowConfig()

    env_recorder = os.getenv("SAGAFLOW_RECORDER")
    if env_recorder:
        config.recorder.backend = env_recorder.lower()
    return config
