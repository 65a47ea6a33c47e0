"""Persistent key-value state for snap configuration.

The host exposes its store through three operations only: ``get``,
``clear`` and ``update``. ``update`` replaces the whole stored object;
there are no partial-field writes.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from badge_insights.exceptions import StoreUnavailableError
from badge_insights.store.sql import METADATA, build_session_factory, snap_state

logger = logging.getLogger(__name__)

DEFAULT_STATE_KEY = "default"


@runtime_checkable
class StateStore(Protocol):
    """Capability interface for the host's persistent store."""

    def get(self) -> dict[str, Any] | None:
        """Return the full stored state, or ``None`` if nothing is stored."""
        ...

    def clear(self) -> None:
        """Remove the stored state."""
        ...

    def update(self, new_state: dict[str, Any]) -> None:
        """Replace the stored state with *new_state*."""
        ...


class MemoryStateStore:
    """In-process store; values are deep-copied on the way in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._state: dict[str, Any] | None = copy.deepcopy(initial)

    def get(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._state)

    def clear(self) -> None:
        self._state = None

    def update(self, new_state: dict[str, Any]) -> None:
        self._state = copy.deepcopy(dict(new_state))


class SqlStateStore:
    """State store backed by a one-row-per-key SQL table.

    Args:
        db_path: Convenience path for a local SQLite file. Mutually
            exclusive with *session_factory*.
        session_factory: Pre-configured ``sessionmaker``.
        state_key: Row key; lets several snaps share one database.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        session_factory: sessionmaker | None = None,
        state_key: str = DEFAULT_STATE_KEY,
    ) -> None:
        self.state_key = state_key
        try:
            if session_factory is not None:
                self._session_factory = session_factory
            else:
                self._session_factory = build_session_factory(db_path=db_path)

            with self._session_factory() as session:
                METADATA.create_all(session.connection())
                session.commit()
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailableError(f"Could not open state store: {exc}") from exc

    def get(self) -> dict[str, Any] | None:
        try:
            with self._session_factory() as session:
                row = session.execute(
                    sa.select(snap_state.c.state).where(snap_state.c.state_key == self.state_key)
                ).first()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not read state: {exc}") from exc
        return row[0] if row else None

    def clear(self) -> None:
        try:
            with self._session_factory() as session:
                session.execute(sa.delete(snap_state).where(snap_state.c.state_key == self.state_key))
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not clear state: {exc}") from exc
        logger.debug("Cleared state %s", self.state_key)

    def update(self, new_state: dict[str, Any]) -> None:
        now = datetime.now(timezone.utc)
        try:
            with self._session_factory() as session:
                session.execute(sa.delete(snap_state).where(snap_state.c.state_key == self.state_key))
                session.execute(
                    sa.insert(snap_state).values(state_key=self.state_key, state=dict(new_state), updated_at=now)
                )
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not write state: {exc}") from exc
        logger.debug("Replaced state %s", self.state_key)
