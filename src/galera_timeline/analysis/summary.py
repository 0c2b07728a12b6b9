from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np

from galera_timeline.core.models import Event

_EPOCH = datetime(1970, 1, 1)


@dataclass
class TimelineSummary:
    """Counts and time span of a merged timeline."""

    total_events: int
    events_per_node: Dict[int, int]
    events_per_kind: Dict[str, int]
    untimed_events: int = 0
    first_event: Optional[datetime] = None
    last_event: Optional[datetime] = None
    span_seconds: float = 0.0
    largest_gap_seconds: float = 0.0
    largest_gap_after: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_events": self.total_events,
            "events_per_node": {str(k): v for k, v in self.events_per_node.items()},
            "events_per_kind": self.events_per_kind,
            "untimed_events": self.untimed_events,
            "first_event": self.first_event.isoformat(sep=" ")
            if self.first_event
            else None,
            "last_event": self.last_event.isoformat(sep=" ")
            if self.last_event
            else None,
            "span_seconds": self.span_seconds,
            "largest_gap_seconds": self.largest_gap_seconds,
            "largest_gap_after": self.largest_gap_after.isoformat(sep=" ")
            if self.largest_gap_after
            else None,
        }


def summarize(timeline: List[Event]) -> TimelineSummary:
    """Summarize a merged timeline; events without a timestamp are only counted."""
    summary = TimelineSummary(
        total_events=len(timeline),
        events_per_node=dict(sorted(Counter(e.node for e in timeline).items())),
        events_per_kind=dict(Counter(e.kind for e in timeline).most_common()),
    )

    timed = sorted(e.timestamp for e in timeline if e.has_timestamp)
    summary.untimed_events = len(timeline) - len(timed)
    if not timed:
        return summary

    summary.first_event = timed[0]
    summary.last_event = timed[-1]

    # log times are naive wall-clock values
    seconds = np.array(
        [(t - _EPOCH).total_seconds() for t in timed], dtype=np.float64
    )
    summary.span_seconds = float(seconds[-1] - seconds[0])

    if len(seconds) > 1:
        gaps = np.diff(seconds)
        widest = int(np.argmax(gaps))
        summary.largest_gap_seconds = float(gaps[widest])
        summary.largest_gap_after = timed[widest]

    return summary
