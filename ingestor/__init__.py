"""
Ingestor package: file sampling, dialect selection and streaming parse.

Dialects plug in through a ParserRegistry; see registry.py for details
on how to add a new one.
"""

import logging
from pathlib import Path

from dialects import ParsedLog, ParserOptions

from .registry import REGISTRY, ParserRegistry, build_default_registry
from .stream import ProgressCallback, parse, parse_stream

logger = logging.getLogger(__name__)


def parse_file(
    file_path: str | Path,
    options: ParserOptions | None = None,
    registry: ParserRegistry | None = None,
    on_progress: ProgressCallback | None = None,
) -> ParsedLog | None:
    """
    Select the best dialect for the file and parse it.
    Returns None when no registered dialect claims the file.
    """
    if registry is None:
        registry = REGISTRY
    dialect = registry.select_parser(file_path)
    if dialect is None:
        logger.warning("No compatible parser found for %s", Path(file_path).name)
        return None
    return parse(dialect, file_path, options, on_progress)


__all__ = [
    "REGISTRY",
    "ParserRegistry",
    "build_default_registry",
    "parse",
    "parse_file",
    "parse_stream",
]
