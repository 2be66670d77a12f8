"""
Database engine, session factory and the store handle shared by the app
"""

import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()

USER_DAY_INDEX = "uq_bookings_user_date"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Store:
    """Owns the engine and session factory for one running application.

    Built once at startup from settings and disposed at shutdown; nothing
    opens a connection at import time.
    """

    def __init__(self, database_url: str, echo: bool = False):
        connect_args = {}
        if database_url.startswith("sqlite"):
            # Writers queue on the database lock instead of failing immediately
            connect_args = {"check_same_thread": False, "timeout": 30}

        self.engine = create_engine(database_url, connect_args=connect_args, echo=echo)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(autoflush=False, bind=self.engine)

    def create_schema(self, one_booking_per_user_per_day: bool = True) -> None:
        """Create tables and switch the per-user-per-day unique index on or off"""
        # Import models so they register on Base.metadata
        import app.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

        with self.engine.begin() as conn:
            if one_booking_per_user_per_day:
                conn.execute(text(
                    f"CREATE UNIQUE INDEX IF NOT EXISTS {USER_DAY_INDEX} "
                    "ON bookings (booked_by_user_id, booking_date)"
                ))
            else:
                conn.execute(text(f"DROP INDEX IF EXISTS {USER_DAY_INDEX}"))

        logger.info(
            f"Database schema ready (one booking per user per day: {one_booking_per_user_per_day})"
        )

    def drop_schema(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a session bound to the application's store"""
    db = request.app.state.store.session()
    try:
        yield db
    finally:
        db.close()
