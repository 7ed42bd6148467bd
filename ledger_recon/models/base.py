"""
Database engine, session management, and base model.

Every model inherits from Base. Every request gets a session
from get_db().
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from ledger_recon.config import get_settings

settings = get_settings()

# --- Engine ---
# pool_pre_ping=True tests connections before using them, which
# handles a database restart or a stale connection. Source adapters
# run on a thread pool and each takes its own connection, so the
# pool has to cover SOURCE_MAX_WORKERS on top of request traffic.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    pool_size=settings.SOURCE_MAX_WORKERS + 5,
)

# --- Session Factory ---
# autocommit=False: the caller decides when changes are saved.
# autoflush=False: nothing is sent until an explicit flush or commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally guarantees the session is closed even if
    the endpoint raises, so connections never leak from the pool.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
