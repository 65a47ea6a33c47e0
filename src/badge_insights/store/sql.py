"""SQLAlchemy table definition and engine helpers for the snap state store."""

from __future__ import annotations

from pathlib import Path

import sqlalchemy as sa
from sqlalchemy.orm import sessionmaker

TIMESTAMP = sa.DateTime(timezone=True)

METADATA = sa.MetaData()

# ---------------------------------------------------------------------------
# snap_state — a single JSON document per state key
# ---------------------------------------------------------------------------

snap_state = sa.Table(
    "snap_state",
    METADATA,
    sa.Column("state_key", sa.String(length=64), primary_key=True),
    sa.Column("state", sa.JSON(), nullable=False),
    sa.Column("updated_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
)


def build_engine(*, db_path: str | Path | None = None, echo: bool = False) -> sa.Engine:
    """Create a SQLite engine for the state store.

    Args:
        db_path: Override path for the SQLite file. Defaults to
            ``get_settings().store.sqlite_path``.
        echo: When True, log all SQL statements.
    """
    if db_path is None:
        from badge_insights.settings import get_settings

        db_path = get_settings().store.sqlite_path

    resolved = Path(db_path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    url = f"sqlite:///{resolved.as_posix()}"
    return sa.create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )


def build_session_factory(*, db_path: str | Path | None = None) -> sessionmaker:
    """Return a ``sessionmaker`` bound to the state store engine."""
    engine = build_engine(db_path=db_path)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)
