"""Operator configuration.

``TunerConfig`` is built once at startup and handed to every collaborator.
It is frozen: nothing mutates it after the operator starts.

Each field resolves from ``HPATUNER_<FIELD>`` in the environment (after
``.env`` is loaded), then from the YAML file named by ``HPATUNER_CONFIG``,
then from the default below.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml
from dotenv import load_dotenv

from hpatuner.constants import (
    DEFAULT_ERROR_BACKOFF,
    DEFAULT_KUBE_TIMEOUT,
    DEFAULT_MAX_CONFLICT_RETRIES,
    DEFAULT_METRIC_TIMEOUT,
    DEFAULT_MIN_STEP,
    DEFAULT_REQUEUE_AFTER,
    FIELD_MANAGER,
    GROUP,
    PLURAL,
    VERSION,
)
from hpatuner.utils.data import get_config, parse_bool

ENV_PREFIX = "HPATUNER_"
CONFIG_FILE_ENV = "HPATUNER_CONFIG"

@dataclass(frozen=True)
class TunerConfig:
    group: str = GROUP
    version: str = VERSION
    plural: str = PLURAL
    field_manager: str = FIELD_MANAGER

    requeue_after: float = DEFAULT_REQUEUE_AFTER
    error_backoff: float = DEFAULT_ERROR_BACKOFF
    metric_timeout: float = DEFAULT_METRIC_TIMEOUT
    kube_timeout: float = DEFAULT_KUBE_TIMEOUT
    max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES
    min_step: int = DEFAULT_MIN_STEP

    # Treat a payload without ``error_rate`` as 0.0 instead of failing the pass.
    metric_allow_missing: bool = False

    log_dir: str = ""
    log_level: str = "INFO"
    liveness_endpoint: str = "http://0.0.0.0:8080/healthz"

    def __post_init__(self):
        for name in ("requeue_after", "metric_timeout", "kube_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.error_backoff < 0:
            raise ValueError(f"error_backoff must not be negative, got {self.error_backoff}")
        if self.max_conflict_retries < 0:
            raise ValueError(f"max_conflict_retries must not be negative, got {self.max_conflict_retries}")
        if self.min_step < 0:
            raise ValueError(f"min_step must not be negative, got {self.min_step}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"unknown log_level {self.log_level!r}")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(cls, env_file=".env"):
        """Builds the configuration from the environment, ``.env`` and an optional YAML file."""

        load_dotenv(env_file)
        file_config = read_config_file(os.getenv(CONFIG_FILE_ENV))

        values = {}
        for field in fields(cls):
            raw = get_config(ENV_PREFIX + field.name.upper(), file_config)
            if raw is None:
                continue
            values[field.name] = _coerce(field.name, field.type, raw)
        return cls(**values)

def read_config_file(path):
    """Loads the YAML config file, returning an empty mapping when none is configured."""

    if not path:
        return {}

    with Path(path).open() as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping, got {type(data).__name__}")
    return data

def _coerce(name, type_, raw):
    try:
        if type_ in (bool, "bool"):
            return parse_bool(raw)
        if type_ in (int, "int"):
            if isinstance(raw, bool):
                raise ValueError(raw)
            return int(raw)
        if type_ in (float, "float"):
            if isinstance(raw, bool):
                raise ValueError(raw)
            return float(raw)
        return str(raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid value for {name}: {raw!r}") from e
