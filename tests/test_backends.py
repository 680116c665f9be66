"""Tests for row backends."""

import os
import sqlite3
import tempfile

import pytest

from nestkv import ConfigurationError, MemoryBackend, SQLiteBackend, StoredRow


@pytest.fixture(params=["memory", "sqlite"])
def backend(request):
    """A connected backend of each built-in kind."""
    if request.param == "memory":
        backend = MemoryBackend()
        backend.connect()
    else:
        backend = SQLiteBackend()
        backend.connect(path=":memory:")
    yield backend
    backend.close()


class TestBackendContract:
    """Behaviour shared by every backend."""

    def test_crud_operations(self, backend):
        """Basic CRUD operations work."""
        backend.put("app", '{"a":1}')

        assert backend.get("app") == StoredRow("app", '{"a":1}')
        assert backend.get("missing") is None

        assert backend.exists("app") is True
        assert backend.exists("missing") is False

        assert backend.delete("app") == 1
        assert backend.exists("app") is False
        assert backend.delete("app") == 0

    def test_put_is_upsert(self, backend):
        """Putting an existing key updates it without duplicating."""
        backend.put("x", "5")
        backend.put("x", "10")

        rows = list(backend.scan())
        assert rows == [StoredRow("x", "10")]

    def test_get_many(self, backend):
        """Batched lookup omits absent keys."""
        backend.put("a", "1")
        backend.put("b", "2")

        rows = backend.get_many(["a", "b", "c"])
        assert sorted(rows, key=lambda r: r.key) == [StoredRow("a", "1"), StoredRow("b", "2")]

    def test_get_many_empty(self, backend):
        """An empty key list returns no rows."""
        assert backend.get_many([]) == []

    def test_get_many_duplicates(self, backend):
        """Repeated keys return their row once."""
        backend.put("a", "1")
        assert backend.get_many(["a", "a"]) == [StoredRow("a", "1")]

    def test_get_many_unusual_keys(self, backend):
        """Keys with quotes, commas and unicode match exactly."""
        keys = ['we"ird', "a,b", "ключ", "", "a b"]
        for key in keys:
            backend.put(key, "1")

        rows = backend.get_many(keys + ["absent"])
        assert sorted(row.key for row in rows) == sorted(keys)

    def test_scan(self, backend):
        """scan yields every row."""
        backend.put("a", "1")
        backend.put("b", "2")
        assert {row.key: row.value for row in backend.scan()} == {"a": "1", "b": "2"}

    def test_delete_all(self, backend):
        """delete_all reports how many rows it removed."""
        assert backend.delete_all() == 0

        backend.put("a", "1")
        backend.put("b", "2")
        assert backend.delete_all() == 2
        assert list(backend.scan()) == []


class TestTableConfiguration:
    """Tests for table and column naming."""

    def test_defaults(self):
        """Default names are settings(key, value)."""
        backend = MemoryBackend()
        assert (backend.table, backend.key_column, backend.value_column) == (
            "settings",
            "key",
            "value",
        )

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"table": "settings; DROP TABLE x"},
            {"key_column": "1key"},
            {"value_column": ""},
            {"table": 'a"b'},
        ],
    )
    def test_rejects_bad_identifiers(self, kwargs):
        """Table and column names must be plain identifiers."""
        with pytest.raises(ConfigurationError):
            SQLiteBackend(**kwargs)


class TestSQLiteBackend:
    """Tests specific to SQLiteBackend."""

    def test_custom_table_and_columns(self):
        """Rows land in the configured table and columns."""
        backend = SQLiteBackend(table="app_settings", key_column="name", value_column="payload")
        backend.connect(path=":memory:")

        backend.put("theme", '"dark"')

        row = backend.connection.execute("SELECT name, payload FROM app_settings").fetchone()
        assert tuple(row) == ("theme", '"dark"')
        assert backend.get("theme") == StoredRow("theme", '"dark"')

        backend.close()

    def test_persistence_to_file(self):
        """Data persists to file."""
        with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
            db_path = f.name

        try:
            backend1 = SQLiteBackend()
            backend1.connect(path=db_path)
            backend1.put("app", '{"x":123}')
            backend1.close()

            backend2 = SQLiteBackend()
            backend2.connect(path=db_path)
            assert backend2.get("app") == StoredRow("app", '{"x":123}')
            backend2.close()
        finally:
            os.unlink(db_path)

    def test_get_many_single_statement_for_large_key_sets(self):
        """Thousands of keys go out as one SELECT."""
        backend = SQLiteBackend()
        backend.connect(path=":memory:")
        for i in range(1200):
            backend.put(f"k{i}", str(i))

        statements = []
        backend.connection.set_trace_callback(statements.append)
        rows = backend.get_many([f"k{i}" for i in range(40000)])
        backend.connection.set_trace_callback(None)

        assert len(rows) == 1200
        assert len([s for s in statements if s.lstrip().upper().startswith("SELECT")]) == 1

        backend.close()

    def test_not_connected(self):
        """Using the backend before connect raises."""
        backend = SQLiteBackend()
        with pytest.raises(RuntimeError):
            backend.get("x")

    def test_driver_errors_propagate(self):
        """Driver errors are not translated."""
        backend = SQLiteBackend()
        backend.connect(path=":memory:")
        backend.connection.execute("DROP TABLE settings")

        with pytest.raises(sqlite3.OperationalError):
            backend.get("x")

        backend.close()
