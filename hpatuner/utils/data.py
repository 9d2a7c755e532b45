"""Manages configuration lookups and value formatting."""

import os

def get_config(config_name: str, file_config: dict = None, default=None):
    """Retrieves a configuration value from environment variables or a loaded config mapping."""

    # Environment variables win over everything else.
    ret = os.getenv(config_name)
    if ret is not None:
        return ret

    if not file_config:
        return default

    # Config files use the lowercase name without the prefix, e.g. HPATUNER_REQUEUE_AFTER -> requeue_after.
    key = config_name.split("_", 1)[-1].lower()
    return file_config.get(key, default)

def parse_bool(value) -> bool:
    """Parses booleans coming from env vars or YAML."""

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in ("1", "true", "yes", "on"):
            return True
        if normalized in ("0", "false", "no", "off", ""):
            return False
    raise ValueError(f"not a boolean: {value!r}")

def format_metric(value: float) -> str:
    """Renders a metric value in the fixed two-decimal form stored on the status."""

    return f"{value:.2f}"
