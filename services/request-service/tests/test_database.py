"""
Tests for database configuration and initialization
"""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError

from app.config import Settings
from app.database import (
    _safe_url,
    create_db_engine,
    create_session_factory,
    get_connect_args,
    init_db,
    session_scope,
)
from app.models import Base


class TestDatabaseConfiguration:
    """Test database configuration"""

    def test_safe_url_hides_credentials(self):
        url = "postgresql://user:secret@db:5432/crisis_corner"
        assert _safe_url(url) == "postgresql://***@db:5432/crisis_corner"
        assert "secret" not in _safe_url(url)

    def test_safe_url_without_credentials(self):
        assert _safe_url("sqlite:///:memory:") == "sqlite:///:memory:"

    def test_connect_args(self):
        assert get_connect_args("sqlite:///:memory:") == {"check_same_thread": False}
        assert get_connect_args("postgresql://localhost/db") == {}

    def test_base_metadata_has_tables(self):
        """Test that Base metadata includes the item request table"""
        assert "item_requests" in Base.metadata.tables


class TestDatabaseLifecycle:
    """Test engine, sessions and table creation"""

    @pytest.fixture
    def bare_engine(self):
        engine = create_db_engine(Settings(DATABASE_URL="sqlite:///:memory:"))
        yield engine
        engine.dispose()

    def test_init_db_creates_tables(self, bare_engine):
        init_db(bare_engine)
        assert "item_requests" in inspect(bare_engine).get_table_names()

    def test_init_db_is_idempotent(self, bare_engine):
        init_db(bare_engine)
        init_db(bare_engine)
        assert "item_requests" in inspect(bare_engine).get_table_names()

    def test_init_db_retries_while_database_starts(self, bare_engine):
        error = OperationalError("CREATE TABLE", {}, Exception("connection refused"))
        with patch.object(Base.metadata, "create_all", side_effect=[error, None]) as create_all:
            init_db(bare_engine)
        assert create_all.call_count == 2

    def test_session_scope_yields_working_session(self, bare_engine):
        factory = create_session_factory(bare_engine)
        with session_scope(factory) as db:
            assert db.execute(text("SELECT 1")).scalar() == 1

    def test_session_scope_closes_on_error(self):
        session = MagicMock()
        with pytest.raises(RuntimeError):
            with session_scope(MagicMock(return_value=session)):
                raise RuntimeError("boom")
        session.close.assert_called_once()
