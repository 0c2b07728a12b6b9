import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from galera_timeline.analysis.merge import merge
from galera_timeline.core.exceptions import (
    FileUnavailable,
    MalformedRecord,
    TruncatedRecord,
)
from galera_timeline.core.models import Event
from galera_timeline.parsers.catalog import default_registry
from galera_timeline.parsers.matchers import (
    EventBuilder,
    ExtractionContext,
    MatcherRegistry,
    SequenceGenerator,
)
from galera_timeline.parsers.reader import RecordReader
from galera_timeline.utils.markup import AnsiMarkup, PlainMarkup

logger = logging.getLogger(__name__)


class NodeExtractor:
    """Extracts the known events from one node's log."""

    def __init__(
        self,
        node: int,
        builder: EventBuilder,
        registry: Optional[MatcherRegistry] = None,
        markup: Optional[PlainMarkup] = None,
    ):
        self.node = node
        self.builder = builder
        self.registry = registry or default_registry()
        self.markup = markup if markup is not None else AnsiMarkup()
        self.truncated_count = 0
        self.malformed_count = 0

    def extract_lines(self, lines: Iterable[str], source: str = "") -> List[Event]:
        """
        Scan lines in order and build an event for every recognized record.
        Args:
            lines: Log lines, with or without line terminators
            source: Name used in diagnostics
        Returns:
            Events in file order
        """
        context = ExtractionContext(
            node=self.node, builder=self.builder, markup=self.markup, source=source
        )
        reader = RecordReader(lines)
        events = []

        while not reader.exhausted:
            matcher = self.registry.find(reader.current)
            if matcher is None:
                reader.skip()
                continue

            line_number = reader.line_number
            try:
                events.append(matcher.extract(reader, context))
            except TruncatedRecord as e:
                self.truncated_count += 1
                logger.warning(
                    f"{context.label} line {line_number}: abandoning "
                    f"'{matcher.description}' record: {e}"
                )
                reader.skip()
            except MalformedRecord as e:
                self.malformed_count += 1
                logger.warning(f"{context.label} line {line_number}: {e}")
                reader.skip()

        return events

    def extract_file(self, file_path: str) -> List[Event]:
        """Extract events from a log file. Raises FileUnavailable."""
        logger.info(f"Reading node{self.node} events from {file_path}")
        try:
            with open(
                file_path, "r", encoding="utf-8", errors="replace", newline="\n"
            ) as f:
                events = self.extract_lines(f, source=str(file_path))
        except OSError as e:
            raise FileUnavailable(str(file_path), e.strerror or str(e)) from e

        logger.info(f"Found {len(events)} events in {file_path}")
        return events


class TimelineBuilder:
    """Runs one extractor per node log and merges the results."""

    def __init__(
        self,
        registry: Optional[MatcherRegistry] = None,
        markup: Optional[PlainMarkup] = None,
        sequence: Optional[SequenceGenerator] = None,
    ):
        self.registry = registry or default_registry()
        self.markup = markup if markup is not None else AnsiMarkup()
        self.builder = EventBuilder(sequence)

    def extractor(self, node: int) -> NodeExtractor:
        return NodeExtractor(node, self.builder, self.registry, self.markup)

    def extract(self, file_paths: Sequence[str], workers: int = 1) -> List[List[Event]]:
        """
        Extract per-node event lists; node index is the position in file_paths.

        With workers > 1 files are read concurrently. Sequence numbers stay
        unique but events sharing a timestamp are then ordered by whichever
        node reached the counter first rather than by node index.
        """
        if workers <= 1 or len(file_paths) <= 1:
            return [
                self.extractor(node).extract_file(path)
                for node, path in enumerate(file_paths)
            ]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self.extractor(node).extract_file, path)
                for node, path in enumerate(file_paths)
            ]
            return [future.result() for future in futures]

    def build(self, file_paths: Sequence[str], workers: int = 1) -> List[Event]:
        node_events = self.extract(file_paths, workers=workers)
        timeline = merge(node_events)
        logger.info(
            f"Merged {len(timeline)} events from {len(file_paths)} node logs"
        )
        return timeline


def extract_timeline(
    file_paths: Sequence[str],
    markup: Optional[PlainMarkup] = None,
    workers: int = 1,
) -> List[Event]:
    """Build the merged timeline for node logs given in node order."""
    return TimelineBuilder(markup=markup).build(file_paths, workers=workers)
