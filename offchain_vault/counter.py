"""Monotonic counter persisted in the object store."""

from __future__ import annotations

import struct
import time
from dataclasses import dataclass
from typing import Callable

from offchain_vault.storage import CorruptObjectError, PersistentStore, TeeError

COUNTER_STORAGE_NAME = "counterState"
MAX_RANDOM_MULTIPLIER = 100

_LAYOUT = struct.Struct("<QII")


@dataclass(frozen=True)
class CounterState:
    """Counter value and the time of its last update."""

    counter: int = 0
    last_update: int = 0
    last_update_millis: int = 0

    def to_bytes(self) -> bytes:
        return _LAYOUT.pack(self.counter, self.last_update, self.last_update_millis)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "CounterState":
        if len(raw) != _LAYOUT.size:
            raise CorruptObjectError(
                f"counter state read {len(raw)} over {_LAYOUT.size} bytes"
            )
        return cls(*_LAYOUT.unpack(raw))


class Counter:
    """Counter that advances by one for each second-distinct update."""

    def __init__(
        self, store: PersistentStore, clock: Callable[[], float] = time.time
    ) -> None:
        self.store = store
        self.clock = clock

    def _now(self) -> tuple[int, int]:
        now = self.clock()
        seconds = int(now)
        return seconds & 0xFFFFFFFF, int((now - seconds) * 1000)

    def load(self) -> CounterState:
        """Load the stored state; raises ItemNotFoundError if uninitialised."""
        return CounterState.from_bytes(self.store.read(COUNTER_STORAGE_NAME))

    def save(self, state: CounterState) -> None:
        self.store.create(COUNTER_STORAGE_NAME, state.to_bytes(), overwrite=True)

    def update(self) -> CounterState:
        """Initialise if needed, then increment when time has moved on."""
        try:
            state = self.load()
        except TeeError:
            seconds, millis = self._now()
            state = CounterState(0, seconds, millis)
            self.save(state)

        seconds, millis = self._now()
        if seconds == state.last_update:
            return state

        state = CounterState(
            (state.counter + 1) & 0xFFFFFFFFFFFFFFFF, seconds, millis
        )
        self.save(state)
        return state

    def get_counter(self) -> int:
        return self.load().counter

    def get_timestamp(self) -> int:
        """Seconds of the last update."""
        return self.load().last_update