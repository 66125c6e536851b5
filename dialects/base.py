from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Optional

from .models import FormatDetectionResult, LogEntry
from .options import ParserOptions

# at most this many non-empty sample lines are scored by detect_format
DETECTION_SAMPLE_LINES = 10


class LogParseFailure(Exception):
    """Raised for a non-standard line when the caller asked for stop_on_error."""


class Dialect(ABC):
    """
    One log dialect: a structural line pattern plus its detection heuristic.

    Implementations are stateless with respect to any file, so one instance
    can serve many concurrent parses. Streaming and aggregation live in
    ``ingestor.stream`` and work with any Dialect.
    """

    name: str = ""
    supported_formats: frozenset[str] = frozenset()

    @abstractmethod
    def detect_format(
        self, filename: str, sample_lines: Sequence[str]
    ) -> FormatDetectionResult:
        """
        Return a confidence (0.0–1.0) that this dialect can handle the file.
        Called with the file name and its leading lines.
        """

    @abstractmethod
    def parse_line(
        self, line: str, line_no: int, options: Optional[ParserOptions] = None
    ) -> Optional[LogEntry]:
        """Return a classified entry, or None for a blank line."""

    def handles_extension(self, filename: str) -> bool:
        lowered = filename.lower()
        return any(lowered.endswith(ext.lower()) for ext in self.supported_formats)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
