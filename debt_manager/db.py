import os
import urllib.parse

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Load .env file with explicit UTF-8 encoding
load_dotenv(encoding="utf-8")

DEFAULT_DATABASE_URL = "sqlite:///./debt_manager.db"


def _url_from_parts() -> str | None:
    host = os.getenv("DB_HOST")
    if not host:
        return None

    driver = os.getenv("DB_DRIVER") or "postgresql+psycopg2"
    user = urllib.parse.quote_plus(os.getenv("DB_USER") or "")
    password = urllib.parse.quote_plus(os.getenv("DB_PASSWORD") or "")
    port = os.getenv("DB_PORT")
    name = os.getenv("DB_NAME") or "debt_manager"

    credentials = f"{user}:{password}@" if user else ""
    netloc = f"{host}:{port}" if port else host
    return f"{driver}://{credentials}{netloc}/{name}"


def resolve_database_url() -> str:
    url = os.getenv("DATABASE_URL") or _url_from_parts() or DEFAULT_DATABASE_URL
    # Replace undecodable bytes coming from a badly encoded .env
    return url.encode("utf-8", errors="replace").decode("utf-8")


def build_engine(url: str):
    connect_args: dict = {}
    kwargs: dict = {}

    if url.startswith("postgres"):
        connect_args = {"options": "-c timezone=utc"}
    elif url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        # In-memory databases live on a single connection.
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    return create_engine(url, connect_args=connect_args, **kwargs)


DATABASE_URL = resolve_database_url()

engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
