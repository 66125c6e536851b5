"""
Typed records produced by the dialect parsers.

Every model is frozen: once a parser hands an entry to the stream it is
never reassigned. Field names are snake_case in Python and camelCase when
dumped with ``by_alias=True``.
"""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


class Severity(IntEnum):
    """Ordered severity, aligned with the stdlib logging levels."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class MessageType(str, Enum):
    SQL = "SQL"
    SQL_BIND = "SQL_BIND"
    PERFORMANCE = "PERFORMANCE"
    TRANSACTION = "TRANSACTION"
    ERROR = "ERROR"
    DEBUG = "DEBUG"
    INFO = "INFO"
    UNKNOWN = "UNKNOWN"

    @property
    def is_sql_related(self) -> bool:
        return self in (MessageType.SQL, MessageType.SQL_BIND, MessageType.PERFORMANCE)


class QueryType(str, Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    OTHER = "other"


BindValue = Union[int, str]


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ExecutionContext(_Record):
    """Header fields of one log line."""

    timestamp: str
    full_date: Optional[datetime] = None
    server_info: str = ""
    process_id: str = ""
    memory_usage: str = ""
    memory_mb: float = Field(default=0.0, ge=0, alias="memoryMB")
    connection_index: str = ""


class SQLInfo(_Record):
    """SQL semantics extracted from a SQL, bind or performance message."""

    query: Optional[str] = None
    binds: Optional[Mapping[str, BindValue]] = None
    decoded_query: Optional[str] = None
    execution_time: Optional[float] = Field(default=None, ge=0)
    records_returned: Optional[int] = Field(default=None, ge=0)
    query_type: Optional[QueryType] = None
    tables: frozenset[str] = frozenset()
    is_multi_line: bool = False

    @field_validator("binds", mode="after")
    @classmethod
    def _freeze_binds(
        cls, binds: Optional[Mapping[str, BindValue]]
    ) -> Optional[Mapping[str, BindValue]]:
        # read-only view of a private copy
        return None if binds is None else MappingProxyType(dict(binds))

    @field_serializer("binds")
    def _dump_binds(
        self, binds: Optional[Mapping[str, BindValue]]
    ) -> Optional[dict[str, BindValue]]:
        return None if binds is None else dict(binds)


class LogEntry(_Record):
    """
    One classified record derived from one physical log line.

    ``parsing_issues`` is empty when the line matched the dialect's
    structural pattern; a non-empty tuple marks a fallback entry.
    """

    line_number: int = Field(ge=1)
    raw_line: str
    context: ExecutionContext
    message: str
    message_type: MessageType
    severity: Severity
    sql_info: Optional[SQLInfo] = None
    tags: tuple[str, ...] = ()
    parsing_issues: tuple[str, ...] = ()

    @field_validator("severity", mode="before")
    @classmethod
    def _severity_from_name(cls, value: Any) -> Any:
        if isinstance(value, str) and value.upper() in Severity.__members__:
            return Severity[value.upper()]
        return value

    @field_serializer("severity")
    def _severity_name(self, severity: Severity) -> str:
        return severity.name

    @property
    def is_fallback(self) -> bool:
        return bool(self.parsing_issues)


class FormatDetectionResult(_Record):
    """
    A dialect's self-assessment for a file sample.

    A confidence of 1.0 tells the registry to stop searching.
    """

    can_parse: bool
    confidence: float = Field(ge=0.0, le=1.0)
    format: Optional[str] = None
    reason: str = ""
    parser_name: Optional[str] = None


class ParsingProgress(_Record):
    processed_lines: int
    total_lines: Optional[int] = None
    percentage: float
    processed_bytes: int
    total_bytes: int
    elapsed_ms: float
    estimated_remaining_ms: Optional[float] = None


class DateRange(_Record):
    start: datetime
    end: datetime


class LogFileMetadata(_Record):
    file_name: str
    file_path: str
    file_size_bytes: int
    total_lines: int
    parsed_lines: int
    failed_lines: int
    unique_sessions: int
    date_range: Optional[DateRange] = None
    detected_format: str
    encoding: str


class ParsedLog(_Record):
    metadata: LogFileMetadata
    entries: tuple[LogEntry, ...]
    parsed_at: datetime
    parsing_duration_ms: float
