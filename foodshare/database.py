"""
Database engine and per-request sessions.

Configuration (read from the environment, .env supported):
- DATABASE_URL: SQLAlchemy URL, defaults to a local SQLite file
- SQL_ECHO: log emitted SQL when true/1/yes
"""

import os
from pathlib import Path
from typing import Any, Dict, Generator, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./foodshare.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

# Integer primary keys are signed 64-bit in SQLite and Postgres BIGINT
MAX_ROW_ID = 2**63 - 1


def _engine_kwargs(url: str) -> Dict[str, Any]:
    if not url.startswith("sqlite"):
        return {}
    if ":memory:" not in url:
        Path(url.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)
    return {"connect_args": {"check_same_thread": False}}


engine: Engine = create_engine(DATABASE_URL, echo=SQL_ECHO, **_engine_kwargs(DATABASE_URL))


def coerce_row_id(value: Any) -> Optional[int]:
    """Turn a path/session id into a usable primary key, or None if it cannot match any row"""
    if isinstance(value, bool):
        return None
    try:
        row_id = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if row_id < 1 or row_id > MAX_ROW_ID:
        return None
    return row_id


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Create all tables; models must be imported so SQLModel registers them"""
    from foodshare.models.follow import Follow  # noqa: F401
    from foodshare.models.listing import Listing  # noqa: F401
    from foodshare.models.user import User  # noqa: F401

    SQLModel.metadata.create_all(engine)
