from logging import Formatter

class DelimitedFormatter(Formatter):
    """CSV formatter for audit rows, turning list-like messages into delimited strings."""

    def __init__(self, fmt=None, datefmt=None, delimiter=","):
        super().__init__(fmt, datefmt)
        self.delimiter = delimiter

    def delimit_value(self, value):
        """Render a single cell, quoting it when it would break the row."""

        text = "" if value is None else str(value)
        if self.delimiter in text or '"' in text or "\n" in text:
            text = '"' + text.replace('"', '""') + '"'
        return text

    def delimit_message(self, msg):
        """Convert list-like messages to a delimited string while leaving strings unchanged."""

        if isinstance(msg, (list, tuple)):
            return self.delimiter.join(self.delimit_value(v) for v in msg)
        return str(msg)

    def format(self, record):
        record.msg = self.delimit_message(record.msg)
        return super().format(record)

class KeyValueFormatter(Formatter):
    """Appends the structured context of a record as ``key=value`` pairs."""

    def format(self, record):
        line = super().format(record)
        fields = getattr(record, "fields", None)
        if not fields:
            return line
        context = " ".join(f"{key}={value}" for key, value in fields.items())
        return f"{line} {context}"
