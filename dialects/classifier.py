"""
Dialect-independent classification of a cleaned log message.

Given the message body of one line, the classifier decides the message
type, pulls out SQL semantics, infers a severity and derives tags. The
marker texts are the ones the logging application writes (Portuguese
labels); a dialect can pass extra severity triggers or subclass to swap
the marker patterns.
"""

import re
from collections.abc import Iterable, Sequence
from typing import NamedTuple, Optional

from . import patterns
from .models import MessageType, QueryType, Severity, SQLInfo

DEFAULT_SLOW_QUERY_THRESHOLD = 0.1
VERY_SLOW_QUERY_THRESHOLD = 1.0
LARGE_RESULT_SET = 100

_BLOCK_END = (
    r"(?=\n\s*\n"
    r"|Tempo Execu[çc][ãa]o:"
    r"|Registros Retornados:"
    r"|No Pr[ée] executa BINDS:"
    r"|SQL BIND DECODE:"
    r"|Tipo de query:"
    r"|$)"
)


class Classification(NamedTuple):
    message_type: MessageType
    severity: Severity
    sql_info: Optional[SQLInfo]
    tags: tuple[str, ...]


SeverityTrigger = tuple[re.Pattern, Severity]


class LineClassifier:
    SQL_RAW = re.compile(r"SQL Antes processamento:", re.I)
    SQL_PROCESSED = re.compile(r"SQL Ap[óo]s processamento:", re.I)
    SQL_EXECUTED = re.compile(r"\bSQL:", re.I)
    SQL_BIND = re.compile(r"No Pr[ée] executa BINDS:", re.I)
    SQL_DECODE = re.compile(r"SQL BIND DECODE:", re.I)
    # the application has been seen truncating the decode label
    FALLBACK_DECODE = re.compile(r"SQL BIND? DECODE:", re.I)
    EXECUTION_TIME = re.compile(r"Tempo Execu[çc][ãa]o:", re.I)
    TRANSACTION = re.compile(r"\b(BEGIN TRANSACTION|COMMIT|ROLLBACK)\b", re.I)
    DEBUG_ARROW = re.compile(r"\b(?:STR|INT)->")
    WHERE = re.compile(r"\bWHERE\b", re.I)

    STATEMENT = re.compile(
        r"(?:SQL Antes processamento:|SQL Ap[óo]s processamento:|\bSQL:)"
        r"[ \t]*(?P<body>.*?)" + _BLOCK_END,
        re.I | re.S,
    )
    DECODED = re.compile(r"SQL BIND DECODE:[ \t]*(?P<body>.*?)" + _BLOCK_END, re.I | re.S)

    ERROR_TYPE_KEYWORDS = ("error", "erro", "exception", "fatal")
    CRITICAL_KEYWORDS = ("fatal", "critical", "exception")
    ERROR_KEYWORDS = ("error", "erro", "failed")
    WARNING_KEYWORDS = ("warning", "aviso")
    DEBUG_KEYWORDS = ("debug", "bind")
    TRANSACTION_WORDS = ("BEGIN", "COMMIT", "ROLLBACK")

    def __init__(
        self,
        slow_query_threshold: float = DEFAULT_SLOW_QUERY_THRESHOLD,
        severity_triggers: Iterable[SeverityTrigger] = (),
    ):
        self.slow_query_threshold = slow_query_threshold
        self.severity_triggers: Sequence[SeverityTrigger] = tuple(severity_triggers)

    def classify(
        self, message: str, slow_query_threshold: Optional[float] = None
    ) -> Classification:
        """
        Run the full decision chain on a cleaned message.

        ``slow_query_threshold`` overrides the classifier default for this
        call (it comes from the parse options when the caller set one).
        """
        threshold = self._threshold(slow_query_threshold)
        message_type = self.message_type(message)
        sql_info = self.extract_sql_info(message, message_type)
        execution_time = sql_info.execution_time if sql_info else None
        severity = self.severity(message, message_type, execution_time, threshold)
        tags = self.tags(message, message_type, sql_info, threshold)
        return Classification(message_type, severity, sql_info, tags)

    def _threshold(self, override: Optional[float]) -> float:
        return self.slow_query_threshold if override is None else override

    def message_type(self, message: str) -> MessageType:
        if (
            self.SQL_RAW.search(message)
            or self.SQL_PROCESSED.search(message)
            or self.SQL_EXECUTED.search(message)
        ):
            return MessageType.SQL
        if self.SQL_BIND.search(message) or self.SQL_DECODE.search(message):
            return MessageType.SQL_BIND
        if self.EXECUTION_TIME.search(message):
            return MessageType.PERFORMANCE
        if self.TRANSACTION.search(message):
            return MessageType.TRANSACTION
        lower = message.lower()
        if any(k in lower for k in self.ERROR_TYPE_KEYWORDS):
            return MessageType.ERROR
        if self.DEBUG_ARROW.search(message):
            return MessageType.DEBUG
        return MessageType.INFO

    def fallback_message_type(self, line: str) -> MessageType:
        """Best-effort label for a line that missed the structural pattern."""
        if self.FALLBACK_DECODE.search(line):
            return MessageType.SQL_BIND
        return MessageType.UNKNOWN

    def extract_sql_info(
        self, message: str, message_type: MessageType
    ) -> Optional[SQLInfo]:
        if not message_type.is_sql_related:
            return None

        fields: dict = {}

        statement = self.STATEMENT.search(message)
        if statement:
            body = statement.group("body")
            query = patterns.clean_sql(body)
            if query:
                fields["query"] = query
                fields["is_multi_line"] = "\n" in body.strip() or patterns.is_incomplete_sql(query)

        binds = None
        if self.SQL_BIND.search(message):
            binds = patterns.parse_bind_parameters(message)
            if binds:
                fields["binds"] = binds

        if self.SQL_DECODE.search(message):
            m = self.DECODED.search(message)
            decoded = patterns.clean_sql(m.group("body")) if m else ""
            if decoded:
                fields["decoded_query"] = decoded
        elif binds and "query" in fields:
            fields["decoded_query"] = patterns.substitute_binds(fields["query"], binds)

        execution_time = patterns.extract_execution_time(message)
        if execution_time is not None:
            fields["execution_time"] = execution_time

        records = patterns.extract_records_returned(message)
        if records is not None:
            fields["records_returned"] = records

        if not fields:
            return None

        statement_text = fields.get("query") or fields.get("decoded_query")
        if statement_text:
            fields["query_type"] = patterns.detect_query_type(statement_text)
            fields["tables"] = patterns.extract_tables(statement_text)
        return SQLInfo(**fields)

    def severity(
        self,
        message: str,
        message_type: MessageType,
        execution_time: Optional[float] = None,
        slow_query_threshold: Optional[float] = None,
    ) -> Severity:
        threshold = self._threshold(slow_query_threshold)
        lower = message.lower()

        if any(k in lower for k in self.CRITICAL_KEYWORDS):
            base = Severity.CRITICAL
        elif any(k in lower for k in self.ERROR_KEYWORDS):
            base = Severity.ERROR
        elif any(k in lower for k in self.WARNING_KEYWORDS) or (
            execution_time is not None and execution_time > threshold
        ):
            base = Severity.WARNING
        elif message_type is MessageType.DEBUG or any(
            k in lower for k in self.DEBUG_KEYWORDS
        ):
            base = Severity.DEBUG
        else:
            base = Severity.INFO

        # dialect triggers can only raise the level
        triggered = [sev for pattern, sev in self.severity_triggers if pattern.search(message)]
        return max([base, *triggered])

    def tags(
        self,
        message: str,
        message_type: MessageType,
        sql_info: Optional[SQLInfo],
        slow_query_threshold: Optional[float] = None,
    ) -> tuple[str, ...]:
        threshold = self._threshold(slow_query_threshold)
        tags = [message_type.value.lower()]

        if sql_info is not None:
            elapsed = sql_info.execution_time
            if elapsed is not None and elapsed > threshold:
                tags.append("slow-query")
                if elapsed > VERY_SLOW_QUERY_THRESHOLD:
                    tags.append("very-slow-query")
            statement = sql_info.query or sql_info.decoded_query
            if statement:
                if "SELECT *" in statement.upper():
                    tags.append("select-all")
                if sql_info.query_type is QueryType.SELECT and not self.WHERE.search(statement):
                    tags.append("no-where-clause")
            if sql_info.records_returned is not None and sql_info.records_returned > LARGE_RESULT_SET:
                tags.append("large-result-set")

        upper = message.upper()
        if any(word in upper for word in self.TRANSACTION_WORDS):
            tags.append("transaction")

        return tuple(dict.fromkeys(tags))
