from pathlib import Path

import pytest

SERVER = "2.14.180.156.c-acme-v18.3(RADEZ-58)-25253"


def zlg_line(
    message: str,
    ts: str = "10:15:32",
    pid: str = "48213",
    memory: str = "12.79 mb",
    conn: str = "funcoesGerais::retornarValorParametro",
) -> str:
    return f"[{ts} <{SERVER}> (Pid: {pid}) ({memory}) ] [ConnIdx: {conn}] {message}"


@pytest.fixture
def make_line():
    return zlg_line


@pytest.fixture
def write_log(tmp_path: Path):
    """Write lines to a file under tmp_path and return its path."""

    def _write(lines: list[str], name: str = "app.zlg", encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding=encoding)
        return path

    return _write
