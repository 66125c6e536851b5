import sys

from ingestor.config import configure_logging
from ingestor.registry import REGISTRY


def describe(file_path: str) -> str:
    result = REGISTRY.detect_format(file_path)
    if not result.can_parse:
        return f"{file_path}: {result.reason}"
    return f"{file_path}: {result.parser_name} (confidence={result.confidence:.2f}) {result.reason}"


if __name__ == "__main__":
    configure_logging()
    if len(sys.argv) < 2:
        print("Usage: python scripts/detect_format.py <file> [<file> ...]")
        sys.exit(2)
    for arg in sys.argv[1:]:
        try:
            print(describe(arg))
        except FileNotFoundError as e:
            print(e)
