import logging
import sqlite3
from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from agenda.core import config

logger = logging.getLogger(__name__)

engine: Engine | None = None

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def init_engine(database_url: str | None = None) -> Engine:
    """Create the process-wide connection pool and bind the session factory to it."""
    global engine

    url = database_url or config.DATABASE_URL
    if not url:
        raise RuntimeError('DATABASE_URL is not defined.')

    if engine is not None:
        engine.dispose()

    connect_args = {}
    if url.startswith('sqlite'):
        connect_args = {'check_same_thread': False}

    engine = create_engine(
        url,
        connect_args=connect_args,
        echo=config.DATABASE_ECHO,
        pool_pre_ping=True,
    )
    SessionLocal.configure(bind=engine)
    logger.info('Database engine initialized for %s', engine.url.render_as_string(hide_password=True))
    return engine


def dispose_engine() -> None:
    global engine

    if engine is None:
        return

    engine.dispose()
    engine = None
    logger.info('Database engine disposed')


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_appointment_schema(bind: Engine) -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(bind)
        table_names = inspector.get_table_names()

        if 'appointments' not in table_names or 'appointment_participants' not in table_names:
            _appointment_schema_checked = True
            return

        index_statements = [
            'CREATE INDEX IF NOT EXISTS idx_appointments_date_time '
            'ON appointments(appointment_date, appointment_time)',
            'CREATE INDEX IF NOT EXISTS idx_appointment_participants_appointment '
            'ON appointment_participants(appointment_id)',
            'CREATE INDEX IF NOT EXISTS idx_appointment_participants_email '
            'ON appointment_participants(email)',
        ]

        with bind.begin() as connection:
            for statement in index_statements:
                connection.execute(text(statement))

        _appointment_schema_checked = True
