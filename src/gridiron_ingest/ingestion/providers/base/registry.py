from __future__ import annotations

from typing import Callable

from .errors import UnsupportedProviderError
from .provider import StatsProvider

ProviderFactory = Callable[[], StatsProvider]


class ProviderRegistry:
    """Provider name (case-insensitive) -> factory for a ready-to-use StatsProvider."""

    def __init__(self) -> None:
        self._factories: dict[str, ProviderFactory] = {}

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().lower()

    def register(self, name: str, factory: ProviderFactory) -> None:
        key = self._key(name)
        if key in self._factories:
            raise ValueError(f"Duplicate provider registration: {name}")
        self._factories[key] = factory

    def names(self) -> list[str]:
        return sorted(self._factories)

    def supports(self, name: str) -> bool:
        return self._key(name) in self._factories

    def get(self, name: str) -> StatsProvider:
        factory = self._factories.get(self._key(name))
        if factory is None:
            raise UnsupportedProviderError(name, self.names())
        return factory()
