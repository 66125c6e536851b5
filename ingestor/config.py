import logging
import os

# -----------------------
# Config (env overrides, with sane defaults)
# -----------------------
SAMPLE_LINES = int(os.getenv("ZLG_SAMPLE_LINES", "50"))
PROGRESS_INTERVAL = int(os.getenv("ZLG_PROGRESS_INTERVAL", "100"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for scripts; library modules only create loggers."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
