"""
ZLG dialect: the tagged-bracket log written by the PHP application server.

A well-formed line looks like::

    [10:15:32 <2.14.180.156.c-acme-v18.3(RADEZ-58)-25253> (Pid: 48213) (12.79 mb) ] [ConnIdx: funcoesGerais::retornarValorParametro] SQL: SELECT ...

Lines that do not follow it (wrapped bind dumps, stack traces) still
produce an entry through the fallback path, flagged in ``parsing_issues``.
"""

import logging
import re
from collections.abc import Sequence
from datetime import datetime, time
from typing import Optional

from . import patterns
from .base import DETECTION_SAMPLE_LINES, Dialect
from .classifier import LineClassifier
from .models import (
    ExecutionContext,
    FormatDetectionResult,
    LogEntry,
    Severity,
)
from .options import ParserOptions

logger = logging.getLogger(__name__)

LOG_LINE_RE = re.compile(
    r"^\[(?P<ts>\d{2}:\d{2}:\d{2})\s+<(?P<server>[^>]+)>"
    r"\s+\(Pid:\s+(?P<pid>[^)]+)\)"
    r"\s+\((?P<memory>[^)]+)\)\s*\]"
    r"\s+\[ConnIdx:\s*(?P<conn>[^\]]*)\]"
    r"\s+(?P<msg>.+)$"
)

NON_STANDARD_LINE = "Non-standard line format"
ACCELERATOR_RE = re.compile(r"Ligamos o acelerador", re.I)


class ZlgDialect(Dialect):
    name = "zlg"
    supported_formats = frozenset({".zlg"})

    def __init__(self, classifier: Optional[LineClassifier] = None):
        self.classifier = classifier or LineClassifier()

    def detect_format(
        self, filename: str, sample_lines: Sequence[str]
    ) -> FormatDetectionResult:
        has_extension = self.handles_extension(filename)

        lines = [line.strip() for line in sample_lines if line.strip()]
        lines = lines[:DETECTION_SAMPLE_LINES]
        hits = sum(1 for line in lines if LOG_LINE_RE.match(line))
        ratio = hits / len(lines) if lines else 0.0
        logger.debug("%s: %d/%d sample lines match (ext=%s)", filename, hits, len(lines), has_extension)

        if has_extension and ratio > 0.7:
            return FormatDetectionResult(
                can_parse=True,
                confidence=0.95,
                format=self.name,
                reason="Extension .zlg and content matches ZLG line pattern",
            )
        if ratio > 0.8:
            return FormatDetectionResult(
                can_parse=True,
                confidence=0.85,
                format=self.name,
                reason="Content strongly matches ZLG line pattern",
            )
        if has_extension:
            return FormatDetectionResult(
                can_parse=True,
                confidence=0.6,
                format=self.name,
                reason="Has .zlg extension but content only partially matches",
            )
        return FormatDetectionResult(
            can_parse=False, confidence=0.0, reason="Does not match ZLG format"
        )

    def parse_line(
        self, line: str, line_no: int, options: Optional[ParserOptions] = None
    ) -> Optional[LogEntry]:
        line = line.rstrip("\r\n")
        if not line.strip():
            return None
        options = options or ParserOptions()

        m = LOG_LINE_RE.match(line)
        if not m:
            return self._fallback_entry(line, line_no)

        context = ExecutionContext(
            timestamp=m.group("ts"),
            full_date=self._full_date(m.group("ts"), options),
            server_info=m.group("server"),
            process_id=m.group("pid").strip(),
            memory_usage=m.group("memory").strip(),
            memory_mb=patterns.parse_memory_quantity(m.group("memory")),
            connection_index=m.group("conn").strip(),
        )
        message = patterns.clean_message(m.group("msg"))
        result = self.classifier.classify(message, options.slow_query_threshold)

        tags = list(result.tags)
        if ACCELERATOR_RE.search(message):
            tags.append("accelerator-enabled")
        if result.sql_info is not None:
            if result.sql_info.binds:
                tags.append("has-binds")
            if result.sql_info.decoded_query:
                tags.append("decoded-query")
        if "::" in context.connection_index:
            tags.append("scoped-context")

        return LogEntry(
            line_number=line_no,
            raw_line=line,
            context=context,
            message=message,
            message_type=result.message_type,
            severity=result.severity,
            sql_info=result.sql_info,
            tags=tuple(dict.fromkeys(tags)),
        )

    def _fallback_entry(self, line: str, line_no: int) -> LogEntry:
        message_type = self.classifier.fallback_message_type(line)
        return LogEntry(
            line_number=line_no,
            raw_line=line,
            context=ExecutionContext(timestamp="00:00:00", memory_usage="0 mb"),
            message=patterns.clean_message(line),
            message_type=message_type,
            severity=Severity.INFO,
            tags=(message_type.value.lower(),),
            parsing_issues=(NON_STANDARD_LINE,),
        )

    @staticmethod
    def _full_date(timestamp: str, options: ParserOptions) -> Optional[datetime]:
        if options.base_date is None or not patterns.is_valid_timestamp(timestamp):
            return None
        h, m, s = (int(part) for part in timestamp.split(":"))
        return datetime.combine(options.base_date, time(h, m, s))
