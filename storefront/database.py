# storefront/database.py
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import settings

SQLALCHEMY_DATABASE_URL = settings.database_url

# Engine options depend on the backing database
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    engine_kwargs = {"connect_args": {"check_same_thread": False}}  # SQLite only
else:
    engine_kwargs = {"pool_size": settings.DB_POOL_SIZE, "pool_pre_ping": True}

engine = create_engine(SQLALCHEMY_DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# SQLite leaves foreign keys off unless asked, so ON DELETE rules would be ignored
@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # Make sure every model is registered on Base.metadata
    import storefront.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
