"""
Streaming driver: runs any Dialect over a file, line by line.

`parse_stream` is a lazy, single-pass iterator with bounded memory. The
file handle lives inside a ``with`` block in the generator, so it is closed
when the iterator is exhausted, fails, or is closed/dropped by a consumer
that stops early. `parse` drains the stream into a `ParsedLog`.
"""

import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from dialects import Dialect, LogEntry, LogParseFailure, ParsedLog, ParserOptions
from dialects.models import DateRange, LogFileMetadata, ParsingProgress

from .config import PROGRESS_INTERVAL

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ParsingProgress], None]


@dataclass
class StreamCounters:
    """Mutable read position of one stream, for progress reporting."""

    lines_read: int = 0
    bytes_read: int = 0


def _iter_entries(
    dialect: Dialect, path: Path, options: ParserOptions, counters: StreamCounters
) -> Iterator[LogEntry]:
    open_kwargs = {"encoding": options.encoding, "errors": "ignore", "newline": ""}
    if options.chunk_size:
        open_kwargs["buffering"] = options.chunk_size

    with path.open("r", **open_kwargs) as f:
        for raw in f:
            counters.lines_read += 1
            if options.max_lines is not None and counters.lines_read > options.max_lines:
                break
            counters.bytes_read += len(raw.encode(options.encoding, errors="ignore"))

            line = raw.rstrip("\r\n")
            if not line.strip():
                continue

            entry = dialect.parse_line(line, counters.lines_read, options)
            if entry is None:
                continue
            if entry.parsing_issues and options.stop_on_error:
                raise LogParseFailure(
                    f"{path.name}:{entry.line_number}: {'; '.join(entry.parsing_issues)}"
                )
            if options.accepts(entry):
                yield entry


def parse_stream(
    dialect: Dialect,
    file_path: str | Path,
    options: ParserOptions | None = None,
    counters: StreamCounters | None = None,
) -> Iterator[LogEntry]:
    """
    Lazily parse `file_path` with `dialect`.

    Raises FileNotFoundError right away (not on first pull) for a missing file.
    Pass `counters` to observe lines/bytes consumed while iterating.
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return _iter_entries(dialect, path, options or ParserOptions(), counters or StreamCounters())


def _progress(
    processed: int,
    counters: StreamCounters,
    options: ParserOptions,
    total_bytes: int,
    elapsed_ms: float,
) -> ParsingProgress:
    if options.max_lines is not None:
        percentage = min(counters.lines_read / options.max_lines * 100, 100.0)
    elif total_bytes > 0:
        percentage = min(counters.bytes_read / total_bytes * 100, 100.0)
    else:
        percentage = 0.0

    remaining = None
    if percentage > 0:
        remaining = elapsed_ms / percentage * (100 - percentage)

    return ParsingProgress(
        processed_lines=processed,
        total_lines=options.max_lines,
        percentage=percentage,
        processed_bytes=counters.bytes_read,
        total_bytes=total_bytes,
        elapsed_ms=elapsed_ms,
        estimated_remaining_ms=remaining,
    )


def parse(
    dialect: Dialect,
    file_path: str | Path,
    options: ParserOptions | None = None,
    on_progress: ProgressCallback | None = None,
) -> ParsedLog:
    """Parse a whole file and return the entries with file-level metadata."""
    path = Path(file_path)
    options = options or ParserOptions()
    parsed_at = datetime.now(timezone.utc)
    start = time.monotonic()

    total_bytes = path.stat().st_size
    counters = StreamCounters()
    entries: list[LogEntry] = []

    for entry in parse_stream(dialect, path, options, counters):
        entries.append(entry)
        if on_progress and len(entries) % PROGRESS_INTERVAL == 0:
            elapsed_ms = (time.monotonic() - start) * 1000
            on_progress(_progress(len(entries), counters, options, total_bytes, elapsed_ms))

    failed = sum(1 for e in entries if e.parsing_issues)
    sessions = {e.context.process_id for e in entries if e.context.process_id}
    dates = [e.context.full_date for e in entries if e.context.full_date is not None]

    total_lines = counters.lines_read
    if options.max_lines is not None:
        total_lines = min(total_lines, options.max_lines)

    metadata = LogFileMetadata(
        file_name=path.name,
        file_path=str(path),
        file_size_bytes=total_bytes,
        total_lines=total_lines,
        parsed_lines=len(entries) - failed,
        failed_lines=failed,
        unique_sessions=len(sessions),
        date_range=DateRange(start=min(dates), end=max(dates)) if dates else None,
        detected_format=dialect.name,
        encoding=options.encoding,
    )
    duration_ms = (time.monotonic() - start) * 1000
    logger.info(
        "Parsed %d entries from %s (%d non-standard) in %.0f ms",
        len(entries), path.name, failed, duration_ms,
    )
    return ParsedLog(
        metadata=metadata,
        entries=tuple(entries),
        parsed_at=parsed_at,
        parsing_duration_ms=duration_ms,
    )
