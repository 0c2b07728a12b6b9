"""galera-timeline - Merge Galera cluster node logs into one ordered event timeline."""

from galera_timeline.analysis.merge import merge
from galera_timeline.analysis.pipeline import (
    NodeExtractor,
    TimelineBuilder,
    extract_timeline,
)
from galera_timeline.core.exceptions import (
    FileUnavailable,
    MalformedRecord,
    MalformedTimestamp,
    TimelineError,
    TruncatedRecord,
)
from galera_timeline.core.models import UNKNOWN_TIME, Event
from galera_timeline.parsers.catalog import EVENT_MATCHERS, default_registry
from galera_timeline.parsers.matchers import (
    EventBuilder,
    EventMatcher,
    MatcherRegistry,
    SequenceGenerator,
)

__version__ = "0.1.0"
__all__ = [
    "Event",
    "UNKNOWN_TIME",
    "EventMatcher",
    "MatcherRegistry",
    "EventBuilder",
    "SequenceGenerator",
    "EVENT_MATCHERS",
    "default_registry",
    "NodeExtractor",
    "TimelineBuilder",
    "extract_timeline",
    "merge",
    "TimelineError",
    "FileUnavailable",
    "MalformedTimestamp",
    "MalformedRecord",
    "TruncatedRecord",
]
