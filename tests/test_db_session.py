"""Tests for engine configuration."""

from qyra.db.session import _engine_options


class TestEngineOptions:
    def test_sqlite_allows_cross_thread_use(self):
        options = _engine_options("sqlite:///./data/qyra.db")
        assert options["connect_args"] == {"check_same_thread": False}
        assert "pool_size" not in options

    def test_server_database_gets_pool_sizing(self):
        options = _engine_options("postgresql://qyra:secret@db/qyra")
        assert "connect_args" not in options
        assert options["pool_size"] == 10
        assert options["max_overflow"] == 20
        assert options["pool_pre_ping"] is True
