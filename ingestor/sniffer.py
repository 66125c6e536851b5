import logging
from pathlib import Path

from dialects import Dialect

from .config import SAMPLE_LINES

logger = logging.getLogger(__name__)


def read_sample(
    path: Path, sample_size: int = SAMPLE_LINES, encoding: str = "utf-8"
) -> list[str]:
    """
    Read up to `sample_size` leading lines of a file, line endings removed.
    Raises FileNotFoundError if the file does not exist.
    """
    sample_lines: list[str] = []
    with path.open("r", encoding=encoding, errors="ignore") as f:
        for _ in range(sample_size):
            line = f.readline()
            if not line:
                break
            sample_lines.append(line.rstrip("\r\n"))
    return sample_lines


def sniff_file(path: Path, registry=None) -> Dialect | None:
    """
    Pick the best dialect for the given file, or None when nothing claims it.
    Uses the process-wide registry unless one is passed.
    """
    if registry is None:
        from .registry import REGISTRY as registry  # local import to avoid cycles

    dialect = registry.select_parser(path)
    if dialect is None:
        logger.warning("No dialect matched %s", path.name)
    else:
        logger.debug("Sniffer selected %s for %s", dialect.name, path.name)
    return dialect
