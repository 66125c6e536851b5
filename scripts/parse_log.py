import logging
import sys
from collections import Counter
from pathlib import Path

from dialects import ParserOptions
from dialects.models import ParsingProgress
from dialects.patterns import format_bytes, format_duration
from ingestor import parse_file
from ingestor.config import configure_logging

logger = logging.getLogger(__name__)


def log_progress(progress: ParsingProgress) -> None:
    logger.info(
        "%d entries, %.1f%% (%s of %s)",
        progress.processed_lines,
        progress.percentage,
        format_bytes(progress.processed_bytes),
        format_bytes(progress.total_bytes),
    )


def summarize(file_path: str, base_date: str | None = None) -> dict | None:
    options = ParserOptions(base_date=base_date)
    parsed = parse_file(file_path, options, on_progress=log_progress)
    if parsed is None:
        return None

    meta = parsed.metadata
    severities = Counter(e.severity.name for e in parsed.entries)
    return {
        "file": meta.file_name,
        "format": meta.detected_format,
        "size": format_bytes(meta.file_size_bytes),
        "lines": meta.total_lines,
        "parsed": meta.parsed_lines,
        "failed": meta.failed_lines,
        "sessions": meta.unique_sessions,
        "date_range": (
            f"{meta.date_range.start.isoformat()} .. {meta.date_range.end.isoformat()}"
            if meta.date_range
            else None
        ),
        "severities": dict(severities),
        "duration": format_duration(parsed.parsing_duration_ms),
    }


if __name__ == "__main__":
    configure_logging()
    if len(sys.argv) in (2, 3):
        path = Path(sys.argv[1])
        summary = summarize(str(path), sys.argv[2] if len(sys.argv) == 3 else None)
        if summary is None:
            print(f"No compatible parser for {path.name}")
            sys.exit(1)
        for key, value in summary.items():
            print(f"{key:>10}: {value}")
    else:
        print("Usage: python scripts/parse_log.py <file> [base-date, e.g. 2025-03-14]")
