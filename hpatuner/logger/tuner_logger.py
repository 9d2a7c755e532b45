import logging

from hpatuner.constants import AUDIT_HEADER, TUNER_CSV, TUNER_FILE, TUNER_STDOUT
from hpatuner.utils.logger import get_base_logger, get_csv_logger, get_file_logger

# Register custom log levels with logging.
logging.addLevelName(TUNER_STDOUT, "TUNER_STDOUT")
logging.addLevelName(TUNER_CSV, "TUNER_CSV")
logging.addLevelName(TUNER_FILE, "TUNER_FILE")

class TunerLogger:
    """Centralized logging for hpatuner: console, text file and CSV audit trail.

    Keyword arguments passed to the log methods are attached to the record
    as structured context and rendered as ``key=value`` pairs.
    When ``dirname`` is None only the console logger is created.
    """

    def __init__(self, name="hpatuner", dirname=None, level=logging.INFO, csv_header=AUDIT_HEADER):
        self._std_log = get_base_logger(f"std_{name}", level)
        self._file_log = None
        self._csv_log = None

        if dirname:
            self._file_log = get_file_logger(f"file_{name}", dirname, level=level)
            # The CSV logger has no severity of its own; rows are always written.
            self._csv_log = get_csv_logger(f"csv_{name}", dirname, header=csv_header, level=TUNER_CSV)

    def setLevel(self, level):
        for logger in (self._std_log, self._file_log):
            if logger is not None:
                logger.setLevel(level)

    def _log(self, logger, level, message, args, fields, exc_info=None):
        if logger is not None and logger.isEnabledFor(level):
            logger._log(level, message, args, exc_info=exc_info, extra={"fields": fields})

    def std_log(self, message, *args, **fields):
        self._log(self._std_log, TUNER_STDOUT, message, args, fields)
        self._log(self._file_log, TUNER_FILE, message, args, fields)

    def file_log(self, message, *args, **fields):
        self._log(self._file_log, TUNER_FILE, message, args, fields)

    def warning(self, message, *args, **fields):
        self._log(self._std_log, logging.WARNING, message, args, fields)
        self._log(self._file_log, logging.WARNING, message, args, fields)

    def error(self, message, *args, exc_info=None, **fields):
        self._log(self._std_log, logging.ERROR, message, args, fields, exc_info)
        self._log(self._file_log, logging.ERROR, message, args, fields, exc_info)

    def csv_log(self, row):
        """Write one audit row; ``row`` is a list matching the CSV header after time and name."""

        self._log(self._csv_log, TUNER_CSV, row, (), {})
