from ingestor import build_default_registry, parse_file
from ingestor.registry import ParserRegistry
from scripts.detect_format import describe
from scripts.parse_log import summarize


def test_summarize(make_line, write_log):
    path = write_log(
        [
            make_line("SQL: SELECT * FROM t<br>Tempo Execução: 0.5 segundo(s)", ts="08:00:00"),
            make_line("Erro ao gravar", ts="08:00:05", pid="7"),
            "solta",
        ]
    )
    summary = summarize(str(path), "2025-03-14")

    assert summary["file"] == "app.zlg"
    assert summary["format"] == "zlg"
    assert summary["lines"] == 3
    assert summary["parsed"] == 2
    assert summary["failed"] == 1
    assert summary["sessions"] == 2
    assert summary["severities"] == {"WARNING": 1, "ERROR": 1, "INFO": 1}
    assert summary["date_range"] == "2025-03-14T08:00:00 .. 2025-03-14T08:00:05"


def test_summarize_unknown_format(write_log):
    path = write_log(["just some notes", "nothing structured"], name="notes.txt")
    assert summarize(str(path)) is None


def test_parse_file_with_custom_registry(make_line, write_log):
    path = write_log([make_line("inicio")])
    assert parse_file(path, registry=ParserRegistry()) is None

    parsed = parse_file(path, registry=build_default_registry())
    assert parsed.metadata.detected_format == "zlg"
    assert len(parsed.entries) == 1


def test_describe(make_line, write_log):
    zlg = write_log([make_line("inicio")])
    other = write_log(["hello"], name="notes.txt")
    assert "zlg (confidence=0.95)" in describe(str(zlg))
    assert describe(str(other)).endswith("No compatible parser found")
