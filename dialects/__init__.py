# Explicit re-exports for library users.
from .base import (
    Dialect as Dialect,
)
from .base import (
    LogParseFailure as LogParseFailure,
)
from .classifier import (
    LineClassifier as LineClassifier,
)
from .models import (
    ExecutionContext as ExecutionContext,
)
from .models import (
    FormatDetectionResult as FormatDetectionResult,
)
from .models import (
    LogEntry as LogEntry,
)
from .models import (
    MessageType as MessageType,
)
from .models import (
    ParsedLog as ParsedLog,
)
from .models import (
    QueryType as QueryType,
)
from .models import (
    Severity as Severity,
)
from .models import (
    SQLInfo as SQLInfo,
)
from .options import (
    ParserFilter as ParserFilter,
)
from .options import (
    ParserOptions as ParserOptions,
)
from .zlg import (
    ZlgDialect as ZlgDialect,
)

__all__ = [
    "Dialect",
    "ExecutionContext",
    "FormatDetectionResult",
    "LineClassifier",
    "LogEntry",
    "LogParseFailure",
    "MessageType",
    "ParsedLog",
    "ParserFilter",
    "ParserOptions",
    "QueryType",
    "SQLInfo",
    "Severity",
    "ZlgDialect",
]
