# bakery/database.py
from sqlmodel import SQLModel, create_engine, Session

from bakery.core.config import get_settings


def _with_ssl(url: str) -> str:
    """
    Supabase only accepts TLS connections; add sslmode=require to Postgres
    URLs that do not say otherwise. Other URLs (local SQLite) are untouched.
    """
    if not url.startswith("postgres") or "sslmode=" in url:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}sslmode=require"


# The Supabase pooler in session mode caps concurrent clients
# ("MaxClientsInSessionMode: max clients reached"), so each process keeps
# a single pooled connection and checks it before use.
engine = create_engine(
    _with_ssl(get_settings().DATABASE_URL),
    echo=False,
    pool_pre_ping=True,
    pool_size=1,
    max_overflow=0,
)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.
    Called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session per request.
    """
    with Session(engine) as session:
        yield session
