from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from inventory_app.config import settings

# Execution option read by the SQLite "begin" listener
WRITE_TRANSACTION = {"sqlite_begin": "IMMEDIATE"}


def create_db_engine(database_url: str, echo: bool = False, lock_timeout_seconds: int = None):
    """
    Create the SQLAlchemy engine for the given URL.

    SQLite runs in WAL mode with DEFERRED transactions, so reads never wait
    for a writer. Write transactions opened through begin_write() start with
    BEGIN IMMEDIATE: the engine has no row locks, so the write lock on the
    whole database stands in for SELECT ... FOR UPDATE on the item row.
    """
    if lock_timeout_seconds is None:
        lock_timeout_seconds = settings.lock_timeout_seconds

    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": lock_timeout_seconds},
    )

    @event.listens_for(engine, "connect")
    def _configure_sqlite_connection(dbapi_connection, connection_record):
        # Transaction control is handled by the "begin" listener below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn):
        mode = conn.get_execution_options().get("sqlite_begin", "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine


def begin_write(db):
    """
    Open the session's next transaction as a write transaction.

    A transaction already in progress is committed first: on SQLite a read
    snapshot cannot be upgraded once another writer has committed after it.
    Other backends ignore the option and lock rows inside the transaction.
    """
    if db.in_transaction():
        db.commit()
    db.connection(execution_options=WRITE_TRANSACTION)


def create_session_factory(bind):
    # expire_on_commit=False: returned rows stay readable without opening a new transaction
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


# Application engine and session factory
engine = create_db_engine(settings.database_url, echo=settings.log_sql_queries)

SessionLocal = create_session_factory(engine)

# Declarative base for the ORM models
Base = declarative_base()


# Dependency yielding one session per request
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
