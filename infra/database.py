import os
from typing import Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from infra.models import create_all_tables

load_dotenv()

IN_MEMORY_URL = "sqlite://"


def get_database_url() -> Optional[str]:
    """DATABASE_URL wins; otherwise build a PostgreSQL URL from the DB_* variables."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    user = os.getenv("DB_USER")
    password = os.getenv("DB_PASSWORD")
    host = os.getenv("DB_HOST")
    port = os.getenv("DB_PORT")
    dbname = os.getenv("DB_NAME")

    if not all([user, password, host, port, dbname]):
        return None

    # special characters in the password break the URL otherwise
    encoded_password = quote_plus(password)
    return f"postgresql+psycopg2://{user}:{encoded_password}@{host}:{port}/{dbname}?client_encoding=utf8"


def get_db_engine(url: Optional[str] = None) -> Engine:
    url = url or get_database_url()

    if not url or url == IN_MEMORY_URL:
        print("⚠️ [DB] No database configured in .env, using in-memory SQLite (formulas are not persisted).")
        # one shared connection so every session sees the same in-memory database
        engine = create_engine(
            IN_MEMORY_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(url)

    create_all_tables(engine)
    return engine


def get_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(bind=engine or get_db_engine(), expire_on_commit=False)


def get_session(engine: Optional[Engine] = None) -> Session:
    return get_session_factory(engine)()
