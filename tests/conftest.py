from __future__ import annotations

import pytest

from fakes import FakeConnection, make_metadata
from insert_writer.db.column_metadata import ColumnMetadata
from insert_writer.db.sql_types import SqlType


@pytest.fixture()
def fake_conn() -> FakeConnection:
    """A fresh fake connection that accepts every statement."""
    return FakeConnection()


@pytest.fixture()
def people_metadata() -> tuple[ColumnMetadata, ...]:
    """`people(id integer, name varchar)`."""
    return make_metadata(("id", SqlType.INTEGER), ("name", SqlType.VARCHAR))
