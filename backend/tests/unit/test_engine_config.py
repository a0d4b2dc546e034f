"""Engine options per backend: SQLite stays thread-agnostic, server databases run their sessions in UTC."""
from portal.db.session import _engine_kwargs


def test_sqlite_has_no_pool_or_time_zone_options():
    kwargs = _engine_kwargs("sqlite://")
    assert kwargs == {"connect_args": {"check_same_thread": False}}


def test_mysql_session_time_zone_is_utc():
    kwargs = _engine_kwargs("mysql+pymysql://portal:secret@db/portal")
    assert kwargs["connect_args"] == {"init_command": "SET time_zone = '+00:00'"}
    assert kwargs["pool_pre_ping"] is True


def test_postgresql_session_time_zone_is_utc():
    kwargs = _engine_kwargs("postgresql+psycopg2://portal:secret@db/portal")
    assert kwargs["connect_args"] == {"options": "-c timezone=utc"}
