from __future__ import annotations

import enum
from typing import Iterable, Iterator, Optional

from .models import AttributionRecord


class ParserState(enum.Enum):
    AWAITING_HEADER = "awaiting_header"
    ACCUMULATING_METADATA = "accumulating_metadata"
    RECORD_COMPLETE = "record_complete"


def parse_header(line: str) -> Optional[AttributionRecord]:
    """
    Parse the first line of an incremental blame record:
      <commit> <source line> <result line> <line count>
    Returns None for anything else.
    """
    parts = line.split()
    if len(parts) < 4:
        return None
    try:
        source_line = int(parts[1])
        result_line = int(parts[2])
        line_count = int(parts[3])
    except ValueError:
        return None
    return AttributionRecord(
        commit_id=parts[0],
        source_line=source_line,
        result_line=result_line,
        line_count=line_count,
    )


class RecordParser:
    """
    Line-at-a-time parser for `git blame --incremental` output.

    `feed()` returns a finished record when the line completes one (the
    `filename` key ends every record), otherwise None. A malformed header
    moves the parser to `done`; callers stop feeding at that point.
    """

    def __init__(self) -> None:
        self.state = ParserState.AWAITING_HEADER
        self.done = False
        self._current: Optional[AttributionRecord] = None

    def feed(self, raw_line: str) -> Optional[AttributionRecord]:
        if self.done:
            return None
        line = raw_line.rstrip("\r\n")

        if self.state is ParserState.RECORD_COMPLETE:
            self.state = ParserState.AWAITING_HEADER

        if self.state is ParserState.AWAITING_HEADER:
            record = parse_header(line)
            if record is None:
                self.done = True
                return None
            self._current = record
            self.state = ParserState.ACCUMULATING_METADATA
            return None

        assert self._current is not None
        key, _, value = line.partition(" ")
        self._current.metadata[key] = value
        if key != "filename":
            return None

        record = self._current
        self._current = None
        self.state = ParserState.RECORD_COMPLETE
        return record

    @property
    def pending(self) -> bool:
        return self._current is not None


def iter_records(lines: Iterable[str]) -> Iterator[AttributionRecord]:
    parser = RecordParser()
    for line in lines:
        record = parser.feed(line)
        if record is not None:
            yield record
        if parser.done:
            return


def read_record(lines: Iterator[str]) -> Optional[AttributionRecord]:
    """Pull exactly one record from `lines`; None at end of input or on a malformed/truncated record."""
    parser = RecordParser()
    for line in lines:
        record = parser.feed(line)
        if record is not None:
            return record
        if parser.done:
            return None
    return None
