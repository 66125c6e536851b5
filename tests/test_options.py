import re
from datetime import date

import pytest
from pydantic import ValidationError

from dialects import ParserFilter, ParserOptions, Severity, ZlgDialect


@pytest.fixture
def entries(make_line):
    dialect = ZlgDialect()
    messages = [
        ("Usuario autenticado", "100"),
        ("Erro ao conectar no banco", "100"),
        ("Aviso: parametro ausente", "200"),
        ("STR->nome = 'x'", "300"),
        ("Fatal exception in module", "300"),
    ]
    return [
        dialect.parse_line(make_line(msg, pid=pid), i)
        for i, (msg, pid) in enumerate(messages, start=1)
    ]


def test_include_and_exclude_partition(entries):
    include = ParserOptions(filters=[{"type": "include", "field": "severity", "pattern": "ERROR"}])
    exclude = ParserOptions(filters=[{"type": "exclude", "field": "severity", "pattern": "ERROR"}])

    kept = [e for e in entries if include.accepts(e)]
    dropped = [e for e in entries if exclude.accepts(e)]

    assert all(e.severity is Severity.ERROR for e in kept)
    assert len(kept) + len(dropped) == len(entries)
    assert not {e.line_number for e in kept} & {e.line_number for e in dropped}


def test_filters_combine_with_and(entries):
    options = ParserOptions(
        filters=[
            ParserFilter(type="include", field="process_id", pattern="300"),
            ParserFilter(type="exclude", field="message_type", pattern="DEBUG"),
        ]
    )
    assert [e.line_number for e in entries if options.accepts(e)] == [5]


def test_compiled_pattern_is_regex(entries):
    f = ParserFilter(type="include", field="message", pattern=re.compile(r"^(Erro|Aviso)"))
    assert f.regex
    assert [e.line_number for e in entries if f.accepts(e)] == [2, 3]


def test_regex_flag_compiles_string():
    f = ParserFilter(type="exclude", field="message", pattern=r"STR->\w+", regex=True)
    assert isinstance(f.pattern, re.Pattern)


def test_plain_pattern_is_literal(make_line):
    entry = ZlgDialect().parse_line(make_line("valor a.b lido"), 1)
    dotted = ParserFilter(type="include", field="message", pattern="a.b")
    wildcard = ParserFilter(type="include", field="message", pattern="a?b")
    assert dotted.matches(entry)
    assert not wildcard.matches(entry)


def test_invalid_regex_rejected():
    with pytest.raises(ValidationError):
        ParserFilter(type="include", field="message", pattern="(unclosed", regex=True)


def test_camel_case_field_names(entries):
    f = ParserFilter(type="include", field="processId", pattern="200")
    assert f.field == "process_id"
    assert [e.line_number for e in entries if f.accepts(e)] == [3]

    options = ParserOptions.model_validate(
        {"baseDate": "2025-03-14", "maxLines": 10, "slowQueryThreshold": 0.5, "stopOnError": True}
    )
    assert options.base_date == date(2025, 3, 14)
    assert options.max_lines == 10
    assert options.slow_query_threshold == 0.5
    assert options.stop_on_error


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_lines": 0},
        {"chunk_size": -1},
        {"slow_query_threshold": 0},
        {"base_date": "not a date at all"},
        {"filters": [{"type": "keep", "field": "message", "pattern": "x"}]},
        {"filters": [{"type": "include", "field": "server", "pattern": "x"}]},
    ],
)
def test_invalid_options(kwargs):
    with pytest.raises(ValidationError):
        ParserOptions(**kwargs)


def test_no_filters_accepts_everything(entries):
    assert all(ParserOptions().accepts(e) for e in entries)
