import structlog
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

import core.sqlalchemy_logging  # noqa: F401
from core.settings import Settings

log = structlog.get_logger(__name__)

# Global engine singleton
_engine = None


def reset_engines():
    """Reset global engine singleton. Used for testing."""
    global _engine
    if _engine:
        _engine.dispose()
        _engine = None


def get_engine(settings: Settings):
    """Get or create SQLAlchemy engine."""
    global _engine
    if _engine is None:
        if settings.DATABASE_URL.startswith("postgresql"):
            _engine = create_engine(
                settings.DATABASE_URL,
                future=True,
                poolclass=QueuePool,
                pool_size=settings.DATABASE_POOL_SIZE,
                max_overflow=settings.DATABASE_MAX_OVERFLOW,
                pool_timeout=settings.DATABASE_POOL_TIMEOUT,
                pool_recycle=settings.DATABASE_POOL_RECYCLE,
                pool_pre_ping=True,
            )
        elif settings.DATABASE_URL.startswith("sqlite"):
            # SQLite (tests, embedded hosts): one shared connection
            _engine = create_engine(
                settings.DATABASE_URL,
                future=True,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            _engine = create_engine(settings.DATABASE_URL, future=True)
        log.info("db.engine.created", dialect=_engine.dialect.name)
    return _engine


SessionLocal = sessionmaker(autocommit=False, autoflush=False)


class SessionTransactionalScope:
    """begin/commit/rollback over a SQLAlchemy session.

    The session is not closed by the scope; whoever created it owns it.
    """

    def __init__(self, session: Session):
        self.session = session

    def begin(self) -> None:
        if not self.session.in_transaction():
            self.session.begin()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

