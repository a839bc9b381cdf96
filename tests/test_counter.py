import pytest

from offchain_vault.counter import COUNTER_STORAGE_NAME, Counter, CounterState
from offchain_vault.storage import (
    CorruptObjectError,
    ItemNotFoundError,
    PersistentStore,
)


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def store(tmp_path):
    return PersistentStore(tmp_path)


def test_uninitialised_counter_raises(store):
    counter = Counter(store, FakeClock(1000.0))
    with pytest.raises(ItemNotFoundError):
        counter.get_counter()


def test_first_update_initialises_to_zero(store):
    counter = Counter(store, FakeClock(1000.0))
    counter.update()
    assert counter.get_counter() == 0
    assert counter.get_timestamp() == 1000


def test_update_in_same_second_keeps_value(store):
    clock = FakeClock(1000.2)
    counter = Counter(store, clock)
    counter.update()
    clock.now = 1000.9
    counter.update()
    assert counter.get_counter() == 0


def test_update_after_time_passes_increments_by_one(store):
    clock = FakeClock(1000.0)
    counter = Counter(store, clock)
    counter.update()
    clock.now = 1050.0
    state = counter.update()
    assert state.counter == 1
    assert counter.get_counter() == 1
    assert counter.get_timestamp() == 1050


def test_clock_going_back_still_increments(store):
    clock = FakeClock(2000.0)
    counter = Counter(store, clock)
    counter.update()
    clock.now = 1500.0
    counter.update()
    assert counter.get_counter() == 1
    assert counter.get_timestamp() == 1500


def test_state_persists_across_instances(store):
    clock = FakeClock(10.0)
    Counter(store, clock).update()
    clock.now = 11.0
    Counter(store, clock).update()
    assert Counter(store, clock).get_counter() == 1


def test_save_and_load_round_trip(store):
    counter = Counter(store, FakeClock(0.0))
    state = CounterState(counter=7, last_update=123, last_update_millis=456)
    counter.save(state)
    assert counter.load() == state


def test_corrupt_state_raises(store):
    store.create(COUNTER_STORAGE_NAME, b"short")
    counter = Counter(store, FakeClock(5.0))
    with pytest.raises(CorruptObjectError):
        counter.load()


def test_update_recovers_from_corrupt_state(store):
    store.create(COUNTER_STORAGE_NAME, b"short")
    counter = Counter(store, FakeClock(5.0))
    counter.update()
    assert counter.get_counter() == 0


def test_state_bytes_round_trip():
    state = CounterState(2**40, 99, 1)
    assert CounterState.from_bytes(state.to_bytes()) == state