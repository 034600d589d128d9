from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from adlinkcrawl import config
from adlinkcrawl.db.models import Base

# Account workers run in threads of one process and share this engine.
_ENGINE: Optional[Engine] = None


def make_engine(database_url: Optional[str] = None) -> Engine:
    """Return the process engine for the ads mirror and report tables.

    The first call decides the URL (argument, else DATABASE_URL); later calls
    reuse that engine and its pool.
    """
    global _ENGINE
    if _ENGINE is not None:
        return _ENGINE
    url = database_url or config.DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL not set; point it at the ads mirror database")
    _ENGINE = create_engine(url, pool_pre_ping=True)
    return _ENGINE


def init_db(engine: Engine) -> None:
    """Create the mirror, label and report tables that do not exist yet."""
    Base.metadata.create_all(engine)
