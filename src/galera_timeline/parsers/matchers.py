import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, List, Optional

from galera_timeline.core.exceptions import MalformedTimestamp
from galera_timeline.core.models import UNKNOWN_TIME, Event
from galera_timeline.parsers.reader import RecordReader
from galera_timeline.parsers.timestamps import TimestampLayout, parse_timestamp
from galera_timeline.utils.markup import AnsiMarkup, PlainMarkup

logger = logging.getLogger(__name__)


class SequenceGenerator:
    """Run-wide discovery counter shared by every node's extraction."""

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


class EventBuilder:
    """Stamps extracted records with a node index and the next sequence value."""

    def __init__(self, sequence: Optional[SequenceGenerator] = None):
        self.sequence = sequence or SequenceGenerator()

    def build(
        self,
        timestamp: datetime,
        node: int,
        message: str,
        raw_lines: List[str],
        kind: str = "",
    ) -> Event:
        return Event(
            timestamp=timestamp,
            node=node,
            sequence=self.sequence.next(),
            message=message,
            raw="\n".join(raw_lines),
            kind=kind,
        )


@dataclass
class ExtractionContext:
    """What an extractor needs besides the reader: who it works for and how."""

    node: int
    builder: EventBuilder
    markup: PlainMarkup = field(default_factory=AnsiMarkup)
    source: str = ""

    @property
    def label(self) -> str:
        if self.source:
            return f"node{self.node} ({self.source})"
        return f"node{self.node}"


@dataclass(frozen=True)
class EventMatcher:
    """
    One known event kind.

    ``signature`` recognizes the first line of a record by substring
    containment. ``parse`` turns the record lines into a payload (or is None
    for kinds with a fixed message) and ``render`` formats the payload into
    the event message.
    """

    description: str
    signature: str
    render: Callable[[Any, PlainMarkup], str]
    parse: Optional[Callable[[List[str]], Any]] = None
    lines: int = 1
    layout: TimestampLayout = TimestampLayout.DEFAULT
    timestamp_line: int = 0

    def test(self, line: str) -> bool:
        return self.signature in line

    def extract(self, reader: RecordReader, context: ExtractionContext) -> Event:
        """
        Consume this kind's record from the reader and build its event.
        Raises:
            TruncatedRecord: if the stream ends inside the record
            MalformedRecord: if the payload fields cannot be found
        Nothing is consumed when either is raised.
        """
        line_number = reader.line_number
        lines = reader.peek(self.lines)
        payload = self.parse(lines) if self.parse else None
        message = self.render(payload, context.markup)
        reader.advance(self.lines)

        try:
            timestamp = parse_timestamp(self.layout, lines[self.timestamp_line])
        except MalformedTimestamp as e:
            logger.warning(
                f"{context.label} line {line_number}: {e}; using unknown time"
            )
            timestamp = UNKNOWN_TIME

        return context.builder.build(
            timestamp, context.node, message, lines, kind=self.description
        )


class MatcherRegistry:
    """Ordered event matchers; the first matching signature wins."""

    def __init__(self, matchers: Iterable[EventMatcher]):
        self.matchers = list(matchers)

    def find(self, line: str) -> Optional[EventMatcher]:
        for matcher in self.matchers:
            if matcher.test(line):
                return matcher
        return None

    def add(self, matcher: EventMatcher):
        """Register a matcher with the lowest priority."""
        self.matchers.append(matcher)

    def get(self, description: str) -> EventMatcher:
        for matcher in self.matchers:
            if matcher.description == description:
                return matcher
        raise KeyError(description)

    def __iter__(self) -> Iterator[EventMatcher]:
        return iter(self.matchers)

    def __len__(self) -> int:
        return len(self.matchers)
