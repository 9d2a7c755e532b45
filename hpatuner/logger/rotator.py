from hpatuner.logger.formatter import DelimitedFormatter
from logging.handlers import RotatingFileHandler
from os import path

class LogFileRotator(RotatingFileHandler):
    """Rotating file handler for the CSV audit log, keeping the header across rollovers."""

    def __init__(self, filename, fmt=None, datefmt=None, max_size=0, backup_count=0, header=None, delimiter=",", mode="a", **kwargs):
        file_exists = path.exists(filename) and path.getsize(filename) > 0
        super().__init__(filename, maxBytes=max_size, backupCount=backup_count, mode=mode, **kwargs)

        self.formatter = DelimitedFormatter(fmt, datefmt, delimiter)
        self._header = self.formatter.delimit_message(header) if header else None

        # Write header if the file is new or opened in write mode.
        if self.stream and (mode == "w" or not file_exists) and self._header:
            self.stream.write(self._header + "\n")
            self.flush()

    def doRollover(self):
        """Perform rollover and write the CSV header at the top of the new file."""

        super().doRollover()
        if not self._header or not self.stream:
            return

        # NOTE: written straight to the stream so the header skips row formatting.
        self.stream.write(self._header + "\n")
        self.flush()
