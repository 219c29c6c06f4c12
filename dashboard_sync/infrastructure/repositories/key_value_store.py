"""Key-value persistence used to remember reconciliation progress."""

from __future__ import annotations

from typing import Callable, Protocol

from sqlalchemy.orm import Session

from dashboard_sync.infrastructure.models import KeyValueEntryModel
from dashboard_sync.utils import now_utc


class KeyValueStore(Protocol):
    """Minimal string key-value contract."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Process-local key-value store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._values)


class SqlKeyValueStore:
    """Persist key-value pairs in the ``key_value_entry`` table.

    Each call opens and closes its own session, so a single store can be shared
    by long-lived background tasks.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        with self._session_factory() as session:
            model = session.get(KeyValueEntryModel, key)
            return None if model is None else model.value

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            model = session.get(KeyValueEntryModel, key)
            if model is None:
                model = KeyValueEntryModel(key=key, value=value)
            else:
                model.value = value
                model.updated_at = now_utc()
            session.add(model)
            session.commit()

    def delete(self, key: str) -> None:
        with self._session_factory() as session:
            model = session.get(KeyValueEntryModel, key)
            if model is None:
                return
            session.delete(model)
            session.commit()

    def keys(self, prefix: str = "") -> list[str]:
        with self._session_factory() as session:
            query = session.query(KeyValueEntryModel.key)
            if prefix:
                query = query.filter(KeyValueEntryModel.key.startswith(prefix))
            return [row[0] for row in query.order_by(KeyValueEntryModel.key).all()]


__all__ = ["InMemoryKeyValueStore", "KeyValueStore", "SqlKeyValueStore"]
