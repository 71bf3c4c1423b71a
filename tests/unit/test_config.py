from __future__ import annotations

import pytest

from insert_writer.config import DEFAULT_BATCH_SIZE, WriterConfig, get_batch_size, load_config, parse_columns
from insert_writer.errors import ConfigurationError


def test_parse_columns_strips_and_drops_blanks() -> None:
    assert parse_columns(" id, name ,,born_on ") == ("id", "name", "born_on")
    assert parse_columns(["id", " name"]) == ("id", "name")


def test_load_config_batch_size_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INSERT_WRITER_BATCH_SIZE", "64")
    cfg = load_config(table=" people ", columns="id,name")
    assert cfg == WriterConfig(table="people", columns=("id", "name"), batch_size=64)
    assert cfg.column_count == 2

    # explicit wins over env
    assert load_config(table="people", columns="id", batch_size=3).batch_size == 3


def test_batch_size_default_and_bad_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("INSERT_WRITER_BATCH_SIZE", raising=False)
    assert get_batch_size() == DEFAULT_BATCH_SIZE

    monkeypatch.setenv("INSERT_WRITER_BATCH_SIZE", "lots")
    with pytest.raises(ConfigurationError):
        get_batch_size()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"table": "", "columns": ("id",)},
        {"table": "people", "columns": ()},
        {"table": "people", "columns": ("id", "ID")},
        {"table": "people", "columns": ("id",), "batch_size": 0},
    ],
)
def test_invalid_config_is_rejected(kwargs: dict) -> None:
    with pytest.raises(ConfigurationError):
        WriterConfig(**kwargs)
