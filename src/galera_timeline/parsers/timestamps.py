import re
from datetime import datetime
from enum import Enum

from galera_timeline.core.exceptions import MalformedTimestamp


class TimestampLayout(Enum):
    """Timestamp layouts embedded by the different cluster subsystems."""

    DEFAULT = "default"  # 2017-05-06 16:53:13
    WSREP_SST = "wsrep_sst"  # 20170506 15:14:06.901
    MYSQLD = "mysqld"  # 170505 14:35:47


# Each layout: (pattern locating the substring, strptime format)
_LAYOUTS = {
    # Server lines start with the timestamp; MariaDB pads single-digit hours
    # with a space ("2017-05-05  6:50:37").
    TimestampLayout.DEFAULT: (
        re.compile(r"^\s*(\d{4}-\d{2}-\d{2}\s+\d{1,2}:\d{2}:\d{2})"),
        "%Y-%m-%d %H:%M:%S",
    ),
    TimestampLayout.WSREP_SST: (
        re.compile(r"(?<!\d)(\d{8} \d{2}:\d{2}:\d{2})"),
        "%Y%m%d %H:%M:%S",
    ),
    TimestampLayout.MYSQLD: (
        re.compile(r"(?<!\d)(\d{6}\s+\d{1,2}:\d{2}:\d{2})"),
        "%y%m%d %H:%M:%S",
    ),
}


def parse_timestamp(layout: TimestampLayout, text: str) -> datetime:
    """
    Parse the timestamp embedded in a log line.
    Args:
        layout: The layout the owning event kind is known to use
        text: Raw log line
    Returns:
        Naive datetime with one-second resolution
    Raises:
        MalformedTimestamp: if the substring is absent or invalid
    """
    pattern, fmt = _LAYOUTS[layout]
    match = pattern.search(text)
    if not match:
        raise MalformedTimestamp(layout.value, text)

    # strptime treats a format space as "one or more whitespace"
    try:
        return datetime.strptime(match.group(1), fmt)
    except ValueError:
        raise MalformedTimestamp(layout.value, text)
