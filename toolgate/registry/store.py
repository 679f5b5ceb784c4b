"""Key/value settings stores backing the server registry."""

import copy
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import Setting


class SettingsStore(Protocol):
    """Async key/value contract; values are JSON-compatible documents."""

    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...


class MemorySettingsStore:
    """In-process store. Values are deep-copied so callers cannot alias stored state."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._values: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any:
        return copy.deepcopy(self._values.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)


class SqlSettingsStore:
    """Store backed by the async SQLAlchemy "settings" table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> Any:
        async with self._session_factory() as session:
            result = await session.execute(select(Setting.value).where(Setting.key == key))
            return result.scalar_one_or_none()

    async def set(self, key: str, value: Any) -> None:
        async with self._session_factory() as session:
            setting = await session.get(Setting, key)
            if setting is None:
                session.add(Setting(key=key, value=value))
            else:
                setting.value = value
            await session.commit()
