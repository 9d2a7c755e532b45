from .data import format_metric, get_config, parse_bool
from .time import format_timestamp, get_timestamp

__all__ = ["format_metric", "get_config", "parse_bool", "format_timestamp", "get_timestamp"]
