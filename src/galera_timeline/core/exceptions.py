class TimelineError(Exception):
    """Base class for all timeline extraction errors."""


class ConfigError(TimelineError):
    """Raised when a setting has an unusable value."""


class FileUnavailable(TimelineError):
    """A node log could not be opened or read. Fatal for the whole run."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Cannot read log file {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MalformedTimestamp(TimelineError):
    """The timestamp embedded in a recognized record does not parse."""

    def __init__(self, layout: str, text: str):
        self.layout = layout
        self.text = text
        super().__init__(f"No {layout} timestamp in line: {text!r}")


class TruncatedRecord(TimelineError):
    """The stream ended before a multi-line record was complete."""

    def __init__(self, needed: int, available: int):
        self.needed = needed
        self.available = available
        super().__init__(
            f"Record needs {needed} lines but only {available} remain"
        )


class MalformedRecord(TimelineError):
    """A line matched an event signature but its payload fields are missing."""

    def __init__(self, description: str, line: str):
        self.description = description
        self.line = line
        super().__init__(f"Cannot parse '{description}' record from: {line!r}")
