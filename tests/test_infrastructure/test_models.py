"""
Tests for the table definitions
"""
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateTable

from taskboard.infrastructure.db.models import TaskModel


class TestIdColumns:
    def test_ids_compare_bytewise_on_postgresql(self):
        ddl = str(CreateTable(TaskModel.__table__).compile(dialect=postgresql.dialect()))
        assert 'id VARCHAR(27) COLLATE "C" NOT NULL' in ddl
        assert 'heading_id VARCHAR(27) COLLATE "C" NOT NULL' in ddl

    def test_sqlite_keeps_default_collation(self):
        ddl = str(CreateTable(TaskModel.__table__).compile(dialect=sqlite.dialect()))
        assert "COLLATE" not in ddl
