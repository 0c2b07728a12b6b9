from collections import deque
from typing import Deque, Iterable, Iterator, List, Optional

from galera_timeline.core.exceptions import TruncatedRecord


class RecordReader:
    """
    Single-pass cursor over the lines of one node log.

    Lines are pulled lazily from the underlying iterable and buffered only as
    far as a pending record needs, so a failed ``advance`` leaves the cursor
    where it was.
    """

    def __init__(self, lines: Iterable[str]):
        self._source: Iterator[str] = iter(lines)
        self._buffer: Deque[str] = deque()
        self._source_done = False
        self.line_number = 1  # 1-based number of the current line

    def _fill(self, count: int) -> int:
        while len(self._buffer) < count and not self._source_done:
            try:
                line = next(self._source)
            except StopIteration:
                self._source_done = True
                break
            self._buffer.append(line.rstrip("\r\n"))
        return len(self._buffer)

    @property
    def current(self) -> Optional[str]:
        """The line under the cursor, or None at end of stream."""
        if self._fill(1) == 0:
            return None
        return self._buffer[0]

    @property
    def exhausted(self) -> bool:
        return self._fill(1) == 0

    def peek(self, count: int) -> List[str]:
        """Return ``count`` lines from the current line without consuming them."""
        if count < 1:
            raise ValueError(f"Record length must be positive, got {count}")

        available = self._fill(count)
        if available < count:
            raise TruncatedRecord(count, available)
        return [self._buffer[i] for i in range(count)]

    def advance(self, count: int) -> List[str]:
        """
        Consume ``count`` lines starting at the current line (inclusive).
        Raises:
            TruncatedRecord: if fewer than ``count`` lines remain; nothing is
                consumed in that case
        """
        self.peek(count)
        lines = [self._buffer.popleft() for _ in range(count)]
        self.line_number += count
        return lines

    def skip(self, count: int = 1) -> int:
        """Drop up to ``count`` lines; returns how many were dropped."""
        dropped = 0
        while dropped < count and self._fill(1):
            self._buffer.popleft()
            dropped += 1
        self.line_number += dropped
        return dropped
