import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy import Column, DateTime, String, Text, create_engine, event, exc
from sqlalchemy.orm import declarative_base, sessionmaker

from fitness_map.ports import StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()


class StorageItem(Base):
    __tablename__ = "storage"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    # timezone-aware UTC
    updated_at = Column(DateTime(timezone=True), nullable=False)


def _sqlite_pragmas(dbapi_con, _con_record):
    cur = dbapi_con.cursor()
    cur.execute("PRAGMA journal_mode=WAL;")
    cur.execute("PRAGMA synchronous=NORMAL;")
    cur.close()


class DatabaseManager:
    """Key-value storage on top of a single SQLAlchemy table."""

    def __init__(self, database_url: str):
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        try:
            self.engine = create_engine(
                database_url,
                echo=False,
                future=True,
                connect_args=connect_args,
                pool_pre_ping=True,
            )
            if database_url.startswith("sqlite"):
                event.listen(self.engine, "connect", _sqlite_pragmas)

            Base.metadata.create_all(self.engine)
        except exc.SQLAlchemyError as e:
            raise StorageError(f"Could not open database: {e}") from e

        self.Session = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)

    def get_item(self, key: str) -> str | None:
        try:
            with self.Session() as session:
                item = session.get(StorageItem, key)
                return item.value if item else None
        except exc.SQLAlchemyError as e:
            raise StorageError(f"Could not read {key!r}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            with self.Session() as session:
                item = session.get(StorageItem, key)
                now = datetime.now(tz=ZoneInfo("UTC"))
                if item is None:
                    session.add(StorageItem(key=key, value=value, updated_at=now))
                else:
                    item.value = value
                    item.updated_at = now
                session.commit()
        except exc.SQLAlchemyError as e:
            raise StorageError(f"Could not write {key!r}: {e}") from e
        logger.debug("Stored %d bytes under %r", len(value), key)

    def remove_item(self, key: str) -> None:
        try:
            with self.Session() as session:
                item = session.get(StorageItem, key)
                if item is not None:
                    session.delete(item)
                    session.commit()
        except exc.SQLAlchemyError as e:
            raise StorageError(f"Could not remove {key!r}: {e}") from e

    def close(self) -> None:
        self.engine.dispose()


def open_storage(database_url: str) -> tuple[DatabaseManager, str | None]:
    """Open the configured database, or an in-memory one if that fails.

    The second item is a message for the user when the fallback was used.
    """
    try:
        return DatabaseManager(database_url), None
    except StorageError as e:
        logger.error("Falling back to in-memory storage: %s", e)
        return (
            DatabaseManager("sqlite://"),
            "Could not open the workout database; workouts won't be saved",
        )
