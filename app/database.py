import logging
from contextlib import contextmanager
from typing import Dict, Iterator

from fastapi import Request
from sqlalchemy import create_engine, event, func, select, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.clock import utcnow
from app.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Persistence gateway: owns the engine and session factory for the process.

    Constructed once at startup, ``connect()``-ed before first use and
    ``dispose()``-d at shutdown. Repositories never reach for it directly;
    they receive a session handed out by ``session()``.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        engine_kwargs = {"echo": echo}
        if url.startswith("sqlite"):
            # SQLite configuration for local development/testing
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection so every session sees the same in-memory DB
                engine_kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            raise
        self._connected = True
        logger.info("Database connection established")

    def dispose(self) -> None:
        self.engine.dispose()
        self._connected = False
        logger.info("Database connection closed")

    def create_all(self) -> None:
        """Registers all domain models and emits the schema."""
        import app.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        if not self._connected:
            raise RuntimeError("Database is not connected. Call connect() first")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session for work outside a request (scripts, sweeps)."""
        db = self.session()
        try:
            yield db
        finally:
            db.close()

    def health_check(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def get_stats(self) -> Dict[str, object]:
        from app.models import Application, Category, Company, Job, Skill, User

        counted = {
            "users": User,
            "companies": Company,
            "jobs": Job,
            "applications": Application,
            "categories": Category,
            "skills": Skill,
        }
        with self.session_scope() as db:
            stats: Dict[str, object] = {
                name: db.scalar(select(func.count()).select_from(model))
                for name, model in counted.items()
            }
        stats["last_updated"] = utcnow().isoformat()
        return stats

    def clear_database(self) -> None:
        """Delete every row. Refused in production."""
        if settings.is_production:
            raise RuntimeError("Cannot clear database in production")
        import app.models  # noqa: F401
        with self.engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())
        logger.info("Database cleared")


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    All-or-nothing write scope: commits on success, rolls back and
    re-raises on any error so a partial write is never visible.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def get_db(request: Request):
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the Service Layer.
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
