"""
Tests for settings, engine construction and the outbox ordering lock.
"""
from types import SimpleNamespace

import pytest
from sqlalchemy.pool import StaticPool

from core.event_sink import OutboxEventSink
from core.locks import OUTBOX_LOCK_KEY, lock_outbox
from core.records import Flipped
from database import Settings, create_db_engine
from models import EventLog

from tests._support.addresses import ALICE


class RecordingSession:
    """Stands in for a Session bound to a given dialect; records what it is asked to do."""

    def __init__(self, dialect: str):
        self.calls = []
        self._bind = SimpleNamespace(dialect=SimpleNamespace(name=dialect))

    def get_bind(self):
        return self._bind

    def execute(self, statement, params=None):
        self.calls.append(("execute", str(statement), params))

    def add(self, obj):
        self.calls.append(("add", obj))

    def flush(self):
        self.calls.append(("flush",))


EVENT = Flipped(player=ALICE, game_id=1, prediction=0, outcome=0, won=True)


class TestOutboxLock:
    def test_postgresql_takes_advisory_lock(self):
        session = RecordingSession("postgresql")

        lock_outbox(session)

        assert session.calls == [
            ("execute", "SELECT pg_advisory_xact_lock(:key)", {"key": OUTBOX_LOCK_KEY}),
        ]

    def test_sqlite_needs_no_lock(self):
        session = RecordingSession("sqlite")

        lock_outbox(session)

        assert session.calls == []

    def test_outbox_lock_taken_before_event_insert(self):
        """The event row gets its id only after the ordering lock is held."""
        session = RecordingSession("postgresql")

        OutboxEventSink(session).emit(EVENT)

        kinds = [call[0] for call in session.calls]
        assert kinds == ["execute", "add", "flush"]
        assert "pg_advisory_xact_lock" in session.calls[0][1]
        assert isinstance(session.calls[1][1], EventLog)
        assert session.calls[1][1].data == EVENT.to_dict()

    def test_lock_key_fits_bigint(self):
        assert 0 < OUTBOX_LOCK_KEY < 2**63

    def test_sqlite_outbox_emit(self, db):
        OutboxEventSink(db).emit(EVENT)
        db.commit()

        assert [row.game_id for row in db.query(EventLog).all()] == [1]


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("DATABASE_URL", "ENTROPY_SOURCE", "LOCK_SHARDS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite:///./coin_flip.db"
        assert settings.entropy_source == "clock"
        assert settings.lock_shards == 64

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ENTROPY_SOURCE", "clock_ms")
        monkeypatch.setenv("LOCK_SHARDS", "8")

        settings = Settings(_env_file=None)

        assert settings.entropy_source == "clock_ms"
        assert settings.lock_shards == 8

    def test_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("DATABASE_URL=postgresql://ledger@localhost/coin_flip\n")

        settings = Settings(_env_file=env_file)

        assert settings.database_url == "postgresql://ledger@localhost/coin_flip"


class TestCreateDbEngine:
    @pytest.mark.parametrize("url", ["sqlite://", "sqlite:///:memory:"])
    def test_memory_sqlite_shares_one_connection(self, url):
        engine = create_db_engine(url)
        try:
            assert isinstance(engine.pool, StaticPool)
        finally:
            engine.dispose()

    def test_file_sqlite_keeps_default_pool(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
        try:
            assert not isinstance(engine.pool, StaticPool)
            assert engine.dialect.name == "sqlite"
        finally:
            engine.dispose()
