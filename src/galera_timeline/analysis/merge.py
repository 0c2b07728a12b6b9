from typing import Iterable, List

from galera_timeline.core.models import Event


def merge(node_events: Iterable[Iterable[Event]]) -> List[Event]:
    """
    Merge per-node event lists into one timeline.

    Events are ordered by timestamp; events sharing a timestamp keep their
    discovery order (sequence). No other field takes part in the ordering.
    """
    timeline = [event for events in node_events for event in events]
    timeline.sort(key=Event.sort_key)
    return timeline
