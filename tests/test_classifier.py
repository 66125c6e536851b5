import re

import pytest

from dialects import LineClassifier, MessageType, QueryType, Severity
from dialects.patterns import detect_query_type, extract_tables


@pytest.fixture
def classifier():
    return LineClassifier()


def test_slow_select_all_without_where(classifier):
    result = classifier.classify("SQL: SELECT * FROM orders\nTempo Execução: 0.25 segundo(s)")

    assert result.message_type is MessageType.SQL
    assert result.severity is Severity.WARNING
    assert result.sql_info.query == "SELECT * FROM orders"
    assert result.sql_info.query_type is QueryType.SELECT
    assert result.sql_info.execution_time == 0.25
    assert result.sql_info.tables == {"orders"}
    for tag in ("sql", "slow-query", "select-all", "no-where-clause"):
        assert tag in result.tags
    assert "very-slow-query" not in result.tags


def test_bind_message(classifier):
    result = classifier.classify("No Pré executa BINDS: array ( ':a' => 1, ':b' => 'x' )")

    assert result.message_type is MessageType.SQL_BIND
    assert result.severity is Severity.DEBUG
    assert result.sql_info.binds == {":a": 1, ":b": "x"}
    assert result.sql_info.query is None


def test_performance_only(classifier):
    result = classifier.classify("Tempo Execução: 1.5 segundo(s)")

    assert result.message_type is MessageType.PERFORMANCE
    assert result.severity is Severity.WARNING
    assert result.sql_info.query is None
    assert result.sql_info.execution_time == 1.5
    assert result.tags == ("performance", "slow-query", "very-slow-query")


@pytest.mark.parametrize(
    "message, message_type, severity",
    [
        ("BEGIN TRANSACTION", MessageType.TRANSACTION, Severity.INFO),
        ("Erro ao conectar no banco", MessageType.ERROR, Severity.ERROR),
        ("Fatal exception in module", MessageType.ERROR, Severity.CRITICAL),
        ("Conexão failed", MessageType.INFO, Severity.ERROR),
        ("Aviso: parametro ausente", MessageType.INFO, Severity.WARNING),
        ("STR->nome = 'x'", MessageType.DEBUG, Severity.DEBUG),
        ("Usuario autenticado", MessageType.INFO, Severity.INFO),
    ],
)
def test_message_type_and_severity(classifier, message, message_type, severity):
    result = classifier.classify(message)
    assert result.message_type is message_type
    assert result.severity is severity
    assert result.tags[0] == message_type.value.lower()


def test_transaction_tag_not_duplicated(classifier):
    assert classifier.classify("COMMIT").tags == ("transaction",)


def test_configured_threshold_overrides_default(classifier):
    result = classifier.classify("Tempo Execução: 0.25 segundo(s)", slow_query_threshold=0.5)
    assert result.severity is Severity.INFO
    assert "slow-query" not in result.tags


def test_where_clause_and_large_result_set(classifier):
    result = classifier.classify(
        "SQL: SELECT id FROM users WHERE active = 1 Registros Retornados: 250"
    )
    info = result.sql_info
    assert info.query == "SELECT id FROM users WHERE active = 1"
    assert info.records_returned == 250
    assert "no-where-clause" not in result.tags
    assert "large-result-set" in result.tags


def test_decode_marker(classifier):
    result = classifier.classify("SQL BIND DECODE: SELECT * FROM t WHERE id = 5")

    assert result.message_type is MessageType.SQL_BIND
    assert result.sql_info.decoded_query == "SELECT * FROM t WHERE id = 5"
    assert result.sql_info.query is None
    assert result.sql_info.query_type is QueryType.SELECT
    assert result.sql_info.tables == {"t"}


def test_binds_substituted_when_query_present(classifier):
    result = classifier.classify(
        "SQL: SELECT * FROM t WHERE id = :id No Pré executa BINDS: array ( ':id' => 7 )"
    )
    info = result.sql_info
    assert result.message_type is MessageType.SQL
    assert info.query == "SELECT * FROM t WHERE id = :id"
    assert info.binds == {":id": 7}
    assert info.decoded_query == "SELECT * FROM t WHERE id = 7"


def test_statement_spanning_line_breaks(classifier):
    result = classifier.classify("SQL: SELECT a,\nb FROM t\n\nfim do bloco")
    assert result.sql_info.query == "SELECT a, b FROM t"
    assert result.sql_info.is_multi_line


def test_non_sql_message_has_no_sql_info(classifier):
    assert classifier.classify("Usuario autenticado").sql_info is None


def test_severity_triggers_only_raise():
    classifier = LineClassifier(severity_triggers=[(re.compile("deadlock", re.I), Severity.ERROR)])
    assert classifier.classify("Deadlock detected").severity is Severity.ERROR
    assert classifier.classify("fatal deadlock").severity is Severity.CRITICAL


def test_fallback_message_type(classifier):
    assert classifier.fallback_message_type("SQL BIND DECODE: x") is MessageType.SQL_BIND
    assert classifier.fallback_message_type("SQL BIN DECODE: x") is MessageType.SQL_BIND
    assert classifier.fallback_message_type("  ':bd_c_0' => '1',") is MessageType.UNKNOWN


@pytest.mark.parametrize(
    "message",
    [
        "SQL: SELECT * FROM a JOIN b ON a.id = b.id",
        "SQL Antes processamento: UPDATE stock SET qty = 0",
        "SQL Após processamento: INSERT INTO audit (x) VALUES (1)",
        "SQL: DELETE FROM sessions WHERE ttl < 0",
    ],
)
def test_query_type_and_tables_reextract(classifier, message):
    info = classifier.classify(message).sql_info
    assert detect_query_type(info.query) is info.query_type
    assert extract_tables(info.query) == info.tables


def test_decode_only_statement_gets_statement_tags(classifier):
    result = classifier.classify("SQL BIND DECODE: SELECT * FROM t")
    assert result.sql_info.query is None
    assert "select-all" in result.tags
    assert "no-where-clause" in result.tags


def test_label_right_after_sql_marker_is_not_a_query(classifier):
    result = classifier.classify("SQL: Tempo Execução: 0.2 segundo(s)")
    info = result.sql_info
    assert result.message_type is MessageType.SQL
    assert info.query is None
    assert info.query_type is None
    assert info.execution_time == 0.2
    assert "slow-query" in result.tags
