# kitchen/database.py
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Usually a Postgres URL with the service credentials, e.g.
# postgresql+psycopg2://service_role:<key>@db.example.com:5432/postgres
DATABASE_URL = os.getenv("DATABASE_URL", "").strip() or "sqlite:///./kitchen.sqlite3"

Base = declarative_base()
SessionLocal = sessionmaker(autocommit=False, autoflush=False)
engine = None


def make_engine(url: str, **kwargs):
    # SQLite needs the thread check off for FastAPI's threadpool
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


def configure_engine(url: str, **kwargs):
    """Rebind the session factory, used at startup and by the tests."""
    global engine
    engine = make_engine(url, **kwargs)
    SessionLocal.configure(bind=engine)
    return engine


configure_engine(DATABASE_URL)


def init_db() -> None:
    from kitchen import models  # noqa: F401  registers the tables
    Base.metadata.create_all(bind=engine)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
