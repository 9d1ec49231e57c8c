# submanager/core/database.py
"""Database engine, session factory and table initialization."""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from submanager.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(url: str, **kwargs) -> Engine:
    """Create an engine; SQLite transactions take the write lock up front.

    pysqlite defers BEGIN until the first write, so two sessions that both read
    and then write can fail the lock upgrade instead of waiting. Emitting
    BEGIN IMMEDIATE makes writers queue on the busy timeout.
    """
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", 30)
        engine = create_engine(url, connect_args=connect_args, **kwargs)

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    return create_engine(url, pool_pre_ping=True, **kwargs)


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Get a request-scoped database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def import_models() -> None:
    """Import every model module so the tables register with Base."""
    from submanager.accounts.models import Account  # noqa: F401
    from submanager.packages.models import Package  # noqa: F401
    from submanager.customers.models import Customer, Subscription  # noqa: F401
    from submanager.users.models import User  # noqa: F401
    from submanager.expenses.models import Expense, ExpenseCategory  # noqa: F401
    from submanager.activity.models import ActivityLog  # noqa: F401
    from submanager.logging.models import RequestLog  # noqa: F401


def create_all_tables(bind: Engine = engine) -> None:
    import_models()
    Base.metadata.create_all(bind=bind)


def drop_all_tables(bind: Engine = engine) -> None:
    """Drop all tables (use with caution!)."""
    import_models()
    Base.metadata.drop_all(bind=bind)


def seed_admin(session_factory=SessionLocal) -> None:
    """Create the bootstrap administrator when no users exist."""
    from submanager.users.models import User, UserRole
    from submanager.auth.security import hash_password

    with session_factory() as db:
        if db.query(User).count() > 0:
            return
        db.add(
            User(
                name=settings.ADMIN_NAME,
                email=settings.ADMIN_EMAIL.lower(),
                password=hash_password(settings.ADMIN_PASSWORD),
                role=UserRole.ADMIN.value,
            )
        )
        db.commit()
        logger.info("Created bootstrap administrator %s", settings.ADMIN_EMAIL)


def init_db() -> None:
    """Create tables and seed the bootstrap administrator."""
    create_all_tables()
    seed_admin()
