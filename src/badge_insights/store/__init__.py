"""State store capability — protocol plus memory and SQLite backends."""

from __future__ import annotations

from pathlib import Path

from badge_insights.store.state_store import MemoryStateStore, SqlStateStore, StateStore


def build_state_store(backend: str | None = None, db_path: str | Path | None = None) -> StateStore:
    """Factory: return a ``StateStore`` honouring Badge Insights settings.

    Args:
        backend: ``"sqlite"`` or ``"memory"``. Defaults to ``store.backend``.
        db_path: Optional override for the SQLite file path.

    Raises:
        ValueError: For an unknown backend name.
    """
    if backend is None:
        from badge_insights.settings import get_settings

        backend = get_settings().store.backend

    if backend == "memory":
        return MemoryStateStore()
    if backend == "sqlite":
        return SqlStateStore(db_path=db_path)
    raise ValueError(f"Unknown state store backend: {backend!r}")


__all__ = ["MemoryStateStore", "SqlStateStore", "StateStore", "build_state_store"]
