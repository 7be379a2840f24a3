from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from gridiron_ingest.core.locks import KeyedLock


@dataclass
class RateLimiter:
    """Minimum spacing between requests, tracked per provider key.

    Calls for the same key are serialized on a per-key lock and sleep until
    `delay_ms` has passed since the last permitted call; the timestamp is
    recorded before the lock is released. Different keys never wait on each
    other. One instance is meant to be shared by every job in the process.
    """

    default_delay_ms: int = 1500
    delays_ms: Mapping[str, int] = field(default_factory=dict)

    _sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    _monotonic: Callable[[], float] = field(default=time.monotonic, repr=False)

    def __post_init__(self) -> None:
        self._key_locks = KeyedLock()
        self._last_call: dict[str, float] = {}
        self._last_call_guard = threading.Lock()

    def delay_s(self, provider_key: str) -> float:
        return max(0, self.delays_ms.get(provider_key, self.default_delay_ms)) / 1000.0

    def wait(self, provider_key: str) -> None:
        delay = self.delay_s(provider_key)
        with self._key_locks.hold(provider_key):
            with self._last_call_guard:
                last = self._last_call.get(provider_key)
            if last is not None:
                remaining = delay - (float(self._monotonic()) - last)
                if remaining > 0:
                    self._sleep(remaining)
            with self._last_call_guard:
                self._last_call[provider_key] = float(self._monotonic())
