"""Database schema initialization."""

from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from taxxy.database.models import Base


def init_database(db_path: Path, echo: bool = False):
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
        echo: Whether to echo SQL queries (for debugging)
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Bulk imports classify from worker threads
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=echo,
        connect_args={"check_same_thread": False},
    )

    Base.metadata.create_all(engine)

    return engine


@contextmanager
def session_scope(session_factory, commit: bool = True):
    """
    Context manager for database sessions.

    Args:
        session_factory: Session factory from get_session_factory
        commit: Whether to commit on successful exit (default: True)
    """
    session = session_factory()
    try:
        yield session
        if commit:
            session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_session_factory(engine):
    """
    Get session factory for database operations.

    Args:
        engine: SQLAlchemy engine

    Returns:
        Session factory
    """
    return sessionmaker(bind=engine, expire_on_commit=False)
