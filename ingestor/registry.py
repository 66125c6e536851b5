"""
Dialect registry for the ingestor.

The registry holds dialects ordered by descending priority and picks the
one that claims a file with the highest confidence. Registering a new
dialect needs no change to the streaming code:

    from ingestor.registry import ParserRegistry

    registry = ParserRegistry()
    registry.register(ZlgDialect(), priority=10)
    dialect = registry.select_parser("app.zlg")

`REGISTRY` is a ready-made instance with the built-in dialects. Callers
that want isolation build their own and pass it around.
"""

import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from dialects import Dialect, FormatDetectionResult, ZlgDialect

from .config import SAMPLE_LINES
from .sniffer import read_sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    dialect: Dialect
    priority: int
    formats: frozenset[str]


class ParserRegistry:
    def __init__(self, sample_size: int = SAMPLE_LINES):
        self.sample_size = sample_size
        self._lock = threading.Lock()
        self._registrations: list[Registration] = []

    def register(self, dialect: Dialect, priority: int = 0) -> Dialect:
        """
        Add a dialect. Higher priority is consulted first; equal priorities
        keep their registration order.
        """
        registration = Registration(dialect, priority, frozenset(dialect.supported_formats))
        with self._lock:
            updated = [*self._registrations, registration]
            updated.sort(key=lambda r: -r.priority)
            self._registrations = updated
        logger.debug("Registered dialect %s (priority=%d)", dialect.name, priority)
        return dialect

    def unregister(self, name: str) -> bool:
        with self._lock:
            kept = [r for r in self._registrations if r.dialect.name != name]
            removed = len(kept) < len(self._registrations)
            self._registrations = kept
        return removed

    def clear(self) -> None:
        with self._lock:
            self._registrations = []

    def snapshot(self) -> tuple[Registration, ...]:
        """Consistent view of the registrations at call time."""
        with self._lock:
            return tuple(self._registrations)

    def __len__(self) -> int:
        return len(self.snapshot())

    def __iter__(self) -> Iterator[Dialect]:
        return (r.dialect for r in self.snapshot())

    def names(self) -> list[str]:
        return [r.dialect.name for r in self.snapshot()]

    def get(self, name: str) -> Dialect | None:
        for r in self.snapshot():
            if r.dialect.name == name:
                return r.dialect
        return None

    def by_extension(self, extension: str) -> list[Dialect]:
        wanted = extension.lower().lstrip(".")
        return [
            r.dialect
            for r in self.snapshot()
            if any(fmt.lower().lstrip(".") == wanted for fmt in r.formats)
        ]

    def statistics(self) -> dict:
        by_format: dict[str, list[str]] = {}
        registrations = self.snapshot()
        for r in registrations:
            for fmt in sorted(r.formats):
                by_format.setdefault(fmt, []).append(r.dialect.name)
        return {"total_parsers": len(registrations), "parsers_by_format": by_format}

    def _best_match(
        self, file_path: str | Path
    ) -> tuple[Dialect, FormatDetectionResult] | None:
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        registrations = self.snapshot()
        if not registrations:
            return None

        sample = read_sample(path, self.sample_size)
        best: tuple[Dialect, FormatDetectionResult] | None = None

        for r in registrations:
            try:
                result = r.dialect.detect_format(path.name, sample)
            except Exception as e:
                logger.debug("detect_format failed for %s on %s: %s", r.dialect.name, path.name, e)
                continue

            logger.debug(
                "%s: %s confidence=%.2f (%s)", path.name, r.dialect.name, result.confidence, result.reason
            )
            if not result.can_parse:
                continue
            if result.confidence >= 1.0:
                return r.dialect, result
            if best is None or result.confidence > best[1].confidence:
                best = (r.dialect, result)

        return best

    def select_parser(self, file_path: str | Path) -> Dialect | None:
        """
        Return the dialect that claims the file with the highest confidence,
        or None when no dialect can parse it.
        Raises FileNotFoundError if the file does not exist.
        """
        match = self._best_match(file_path)
        if match is None:
            return None
        dialect, result = match
        logger.debug("Selected %s for %s (conf=%.2f)", dialect.name, Path(file_path).name, result.confidence)
        return dialect

    def detect_format(self, file_path: str | Path) -> FormatDetectionResult:
        """Diagnostic variant of select_parser that reports the winning result."""
        match = self._best_match(file_path)
        if match is None:
            return FormatDetectionResult(
                can_parse=False, confidence=0.0, reason="No compatible parser found"
            )
        dialect, result = match
        return result.model_copy(update={"parser_name": dialect.name})

    def can_parse_file(self, file_path: str | Path) -> bool:
        try:
            return self.select_parser(file_path) is not None
        except OSError as e:
            logger.debug("can_parse_file(%s): %s", file_path, e)
            return False


def build_default_registry() -> ParserRegistry:
    """Fresh registry holding the built-in dialects."""
    registry = ParserRegistry()
    registry.register(ZlgDialect(), priority=10)
    return registry


# Process-wide convenience instance
REGISTRY = build_default_registry()


def register(dialect: Dialect, priority: int = 0) -> Dialect:
    """Register a dialect into the process-wide REGISTRY."""
    return REGISTRY.register(dialect, priority)
