"""Database connection and initialization."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config import DATA_DIR, DATABASE_URL, DB_PATH
from db.models import Base

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the SQLAlchemy engine."""
    global _engine
    if _engine is None:
        if DATABASE_URL:
            _engine = create_engine(DATABASE_URL, echo=False)
        else:
            DATA_DIR.mkdir(parents=True, exist_ok=True)
            # Sync routes run in a threadpool, so the connection may cross threads
            _engine = create_engine(
                f"sqlite:///{DB_PATH}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
    return _engine


def get_session() -> Session:
    """Create a new database session."""
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory()


def init_db() -> None:
    """Create all tables if they don't exist, then run migrations."""
    from db.migrations import run_migrations

    engine = get_engine()
    Base.metadata.create_all(engine)
    run_migrations(engine)
