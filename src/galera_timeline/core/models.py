from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

# Assigned to events whose embedded timestamp could not be parsed.
UNKNOWN_TIME = datetime.min


@dataclass(frozen=True)
class Event:
    """A single point-in-time occurrence attributable to one cluster node."""

    timestamp: datetime
    node: int
    sequence: int
    message: str
    raw: str
    kind: str = ""

    @property
    def has_timestamp(self) -> bool:
        return self.timestamp != UNKNOWN_TIME

    @property
    def raw_lines(self):
        return self.raw.split("\n")

    def sort_key(self):
        return (self.timestamp, self.sequence)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation of the event."""
        return {
            "timestamp": self.timestamp.isoformat(sep=" ")
            if self.has_timestamp
            else None,
            "node": self.node,
            "sequence": self.sequence,
            "kind": self.kind,
            "message": self.message,
            "raw": self.raw,
        }
