from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from iam.config import settings


def engine_options(database_url: str) -> dict:
    """
    Keyword arguments for create_engine.

    SQLite gets the thread check disabled (FastAPI runs sync dependencies in
    a threadpool) and no pool sizing; server databases get a sized pool.
    """
    options = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.DEBUG,  # Log SQL queries in debug mode
    }
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.DB_POOL_SIZE
        options["max_overflow"] = settings.DB_MAX_OVERFLOW
    return options


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """
    FastAPI dependency for database sessions.

    Yields a session per request and closes it afterwards. Repositories
    commit their own writes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
