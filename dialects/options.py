"""
Parse options and entry filters.

Filters decide once, at construction, whether their pattern is a literal
substring or a compiled regular expression.
"""

import re
from datetime import date, datetime
from typing import Any, Literal, Optional, Union

from dateutil import parser as dtp
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .models import LogEntry

FilterField = Literal["message", "process_id", "severity", "message_type"]

_FIELD_ALIASES = {"processId": "process_id", "messageType": "message_type"}


class ParserFilter(BaseModel):
    """
    Include/exclude rule evaluated against one field of an entry.

    Example:
        ParserFilter(type="include", field="severity", pattern="ERROR")
        ParserFilter(type="exclude", field="message", pattern=r"STR->\\w+", regex=True)
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["include", "exclude"]
    field: FilterField
    pattern: Union[str, re.Pattern]
    regex: bool = False

    @model_validator(mode="before")
    @classmethod
    def _compile_pattern(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            field = data.get("field")
            data["field"] = _FIELD_ALIASES.get(field, field)
            pattern = data.get("pattern")
            if data.get("regex") and isinstance(pattern, str):
                try:
                    data["pattern"] = re.compile(pattern)
                except re.error as e:
                    raise ValueError(f"invalid filter pattern {pattern!r}: {e}") from e
            elif isinstance(pattern, re.Pattern):
                data["regex"] = True
        return data

    def value_of(self, entry: LogEntry) -> str:
        if self.field == "message":
            return entry.message
        if self.field == "process_id":
            return entry.context.process_id
        if self.field == "severity":
            return entry.severity.name
        return entry.message_type.value

    def matches(self, entry: LogEntry) -> bool:
        value = self.value_of(entry)
        if isinstance(self.pattern, re.Pattern):
            return self.pattern.search(value) is not None
        return self.pattern in value

    def accepts(self, entry: LogEntry) -> bool:
        hit = self.matches(entry)
        return hit if self.type == "include" else not hit


class ParserOptions(BaseModel):
    """Options for a single parse run. camelCase keys are accepted."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    base_date: Optional[date] = None
    slow_query_threshold: Optional[float] = Field(default=None, gt=0)
    max_lines: Optional[int] = Field(default=None, gt=0)
    encoding: str = "utf-8"
    chunk_size: Optional[int] = Field(default=None, gt=0)
    stop_on_error: bool = False
    filters: tuple[ParserFilter, ...] = ()

    @field_validator("base_date", mode="before")
    @classmethod
    def _parse_base_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return dtp.parse(value).date()
            except (ValueError, OverflowError) as e:
                raise ValueError(f"unparseable base date {value!r}") from e
        if isinstance(value, datetime):
            return value.date()
        return value

    def accepts(self, entry: LogEntry) -> bool:
        """True when the entry satisfies every configured filter."""
        return all(f.accepts(entry) for f in self.filters)
