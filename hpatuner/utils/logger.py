import logging

from hpatuner.constants import DEFAULT_FMT, TUNER_CSV, TUNER_FILE, TUNER_STDOUT
from hpatuner.logger.formatter import DelimitedFormatter, KeyValueFormatter
from hpatuner.logger.rotator import LogFileRotator
from pathlib import Path

def get_base_logger(name=None, level=TUNER_STDOUT, handlers=None, formatter=None):
    """Create and configure a logger that outputs messages to the console or specified handlers."""

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Loggers are process-wide, so a second call with the same name must not stack handlers.
    if logger.handlers:
        return logger

    if not handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter or KeyValueFormatter(fmt=DEFAULT_FMT))
        handlers = [handler]
    elif not isinstance(handlers, (list, tuple)):
        handlers = [handlers]

    for handler in handlers:
        logger.addHandler(handler)

    # Kopf installs its own root handler; keep our records out of it.
    logger.propagate = False
    return logger

def get_file_logger(name=None, dirname="logs", filename=None, mode="a", level=TUNER_FILE, **kwargs):
    """Create a file-based logger that writes structured lines to a persistent file."""

    existing = logging.getLogger(name)
    if existing.handlers:
        return existing

    filename = Path(dirname) / (filename or f"log_{name}.txt")
    filename.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(filename, mode=mode)
    handler.setFormatter(KeyValueFormatter(fmt=DEFAULT_FMT))

    return get_base_logger(name, level=level, handlers=handler, **kwargs)

def get_csv_logger(name=None, dirname="logs", filename=None, header=None, mode="a", delimiter=",",
                   datefmt="%Y-%m-%dT%H:%M:%S", max_size=0, level=TUNER_CSV, **kwargs):
    """Create a CSV logger whose rows start with the record time and logger name."""

    existing = logging.getLogger(name)
    if existing.handlers:
        return existing

    fmt = f"%(asctime)s{delimiter}%(name)s{delimiter}%(message)s"

    filename = Path(dirname) / (filename or f"log_{name}.csv")
    filename.parent.mkdir(parents=True, exist_ok=True)

    handler = LogFileRotator(filename, fmt=fmt, datefmt=datefmt, max_size=max_size,
                             backup_count=3 if max_size else 0, header=header,
                             delimiter=delimiter, mode=mode)
    handler.setFormatter(DelimitedFormatter(fmt=fmt, datefmt=datefmt, delimiter=delimiter))

    return get_base_logger(name, level=level, handlers=handler, **kwargs)
