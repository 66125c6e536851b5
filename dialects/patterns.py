"""
Stateless extraction helpers shared by the dialect parsers.

None of these raise on a missing match: "not found" is returned as 0,
None or an empty collection, depending on the helper.
"""

import re
from typing import Optional

from .models import BindValue, QueryType

MARKUP_RE = re.compile(r"</?[A-Za-z][^<>]*>")
LINE_BREAK_RE = re.compile(r"<br\s*/?>", re.I)
WHITESPACE_RE = re.compile(r"\s+")
TIMESTAMP_RE = re.compile(r"\b(\d{2}):(\d{2}):(\d{2})\b")

MEMORY_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(kb|mb|gb)?\b", re.I)
EXECUTION_TIME_RE = re.compile(
    r"Tempo Execu[çc][ãa]o:\s*(\d+(?:\.\d+)?)\s*segundo", re.I
)
RECORDS_RETURNED_RE = re.compile(r"Registros Retornados:\s*(\d+)", re.I)
QUERY_KEYWORD_RE = re.compile(r"^[\s(]*([A-Z]+)")
TABLE_RE = re.compile(
    r"\b(?:FROM|JOIN|INTO|UPDATE)\s+([A-Za-z_][\w$]*(?:\.[A-Za-z_][\w$]*)?)",
    re.I,
)
BIND_PAIR_RE = re.compile(
    r"""'(?P<name>[^']+)'\s*=>\s*(?:'(?P<text>[^']*)'|(?P<number>-?\d+)\b)"""
)

_MEMORY_FACTORS = {"kb": 1 / 1024, "mb": 1.0, "gb": 1024.0}
_QUERY_TYPES = {
    "SELECT": QueryType.SELECT,
    "INSERT": QueryType.INSERT,
    "UPDATE": QueryType.UPDATE,
    "DELETE": QueryType.DELETE,
}


def strip_markup(text: str) -> str:
    """Remove ``<tag>``-shaped markup."""
    return MARKUP_RE.sub("", text)


def normalize_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text).strip()


def clean_message(text: str) -> str:
    """Turn line-break markup into newlines, drop other markup, trim."""
    return strip_markup(LINE_BREAK_RE.sub("\n", text)).strip()


def clean_sql(text: str) -> str:
    """Flatten a logged statement into a single-spaced string."""
    return normalize_whitespace(strip_markup(LINE_BREAK_RE.sub("\n", text)))


def is_valid_timestamp(text: str) -> bool:
    m = TIMESTAMP_RE.fullmatch(text)
    if not m:
        return False
    h, mi, s = (int(g) for g in m.groups())
    return h < 24 and mi < 60 and s < 60


def parse_memory_quantity(text: str) -> float:
    """
    Convert a quantity such as ``"12.79 mb"`` to megabytes.

    A missing or unknown unit counts as MB. Returns 0 when no number is found.
    """
    m = MEMORY_RE.search(text or "")
    if not m:
        return 0.0
    unit = (m.group(2) or "mb").lower()
    return float(m.group(1)) * _MEMORY_FACTORS.get(unit, 1.0)


def extract_execution_time(text: str) -> Optional[float]:
    """Seconds from ``Tempo Execução: 0.001 segundo(s)``, or None."""
    m = EXECUTION_TIME_RE.search(text)
    return float(m.group(1)) if m else None


def extract_records_returned(text: str) -> Optional[int]:
    m = RECORDS_RETURNED_RE.search(text)
    return int(m.group(1)) if m else None


def detect_query_type(sql: str) -> QueryType:
    m = QUERY_KEYWORD_RE.match(sql.strip().upper())
    if not m:
        return QueryType.OTHER
    return _QUERY_TYPES.get(m.group(1), QueryType.OTHER)


def extract_tables(sql: str) -> frozenset[str]:
    """Lower-cased identifiers following FROM, JOIN, INTO and UPDATE."""
    return frozenset(name.lower() for name in TABLE_RE.findall(sql))


def parse_bind_parameters(text: str) -> Optional[dict[str, BindValue]]:
    """
    Read name/value pairs from a PHP ``array (...)`` dump.

    Quoted values stay strings, bare integers become ints.
    Returns None when no pair is present.
    """
    binds: dict[str, BindValue] = {}
    for m in BIND_PAIR_RE.finditer(text):
        if m.group("number") is not None:
            binds[m.group("name")] = int(m.group("number"))
        else:
            binds[m.group("name")] = m.group("text")
    return binds or None


def substitute_binds(sql: str, binds: dict[str, BindValue]) -> str:
    """Inline bind values into ``sql``; longest names go first."""
    result = sql
    for name in sorted(binds, key=len, reverse=True):
        value = binds[name]
        literal = f"'{value}'" if isinstance(value, str) else str(value)
        result = re.sub(re.escape(name) + r"(?!\w)", lambda _m: literal, result)
    return result


def is_incomplete_sql(text: str) -> bool:
    """True when a statement obviously continues past this text."""
    trimmed = text.strip()
    upper = trimmed.upper()
    if trimmed.endswith((",", "(")) or upper.endswith((" AND", " OR")):
        return True
    return "SELECT" in upper and "FROM" not in upper


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


def format_duration(ms: float) -> str:
    if ms < 1000:
        return f"{ms:.0f}ms"
    if ms < 60_000:
        return f"{ms / 1000:.2f}s"
    if ms < 3_600_000:
        return f"{ms / 60_000:.2f}m"
    return f"{ms / 3_600_000:.2f}h"
