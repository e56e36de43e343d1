"""
Concurrent join/leave must not lose participant count updates.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from grouprides.core.exceptions import ValidationError
from grouprides.db.session import SessionLocal
from grouprides.services.storage import DatabaseStorage

RIDERS = 12


def _run_concurrently(count, action):
    """Run ``action(index, storage)`` from ``count`` threads, each with its own session."""
    barrier = threading.Barrier(count)

    def worker(index):
        session = SessionLocal()
        try:
            barrier.wait()
            return action(index, DatabaseStorage(session))
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(worker, range(count)))


def test_concurrent_joins_keep_count_exact(storage, make_ride):
    ride_id = make_ride().id

    _run_concurrently(RIDERS, lambda i, s: s.join_ride(ride_id, f"rider-{i}", f"Rider {i}"))

    storage.db.expire_all()
    assert storage.get_ride(ride_id).participant_count == RIDERS
    assert len(storage.list_participants(ride_id)) == RIDERS


def test_concurrent_leaves_keep_count_exact(storage, make_ride):
    ride_id = make_ride().id
    for i in range(RIDERS):
        storage.join_ride(ride_id, f"rider-{i}", f"Rider {i}")

    results = _run_concurrently(RIDERS, lambda i, s: s.leave_ride(ride_id, f"rider-{i}"))

    storage.db.expire_all()
    assert all(results)
    assert storage.get_ride(ride_id).participant_count == 0
    assert storage.list_participants(ride_id) == []


def test_concurrent_duplicate_joins_create_one_row(storage, make_ride):
    ride_id = make_ride().id

    def join_same_rider(index, thread_storage):
        try:
            thread_storage.join_ride(ride_id, "same-rider", "Alice")
            return True
        except ValidationError:
            return False

    results = _run_concurrently(6, join_same_rider)

    storage.db.expire_all()
    assert results.count(True) == 1
    assert storage.get_ride(ride_id).participant_count == 1
    assert len(storage.list_participants(ride_id)) == 1


def test_concurrent_joins_respect_capacity(storage, make_ride):
    ride_id = make_ride(max_participants=3).id

    def try_join(index, thread_storage):
        try:
            thread_storage.join_ride(ride_id, f"rider-{index}", f"Rider {index}")
            return True
        except ValidationError:
            return False

    results = _run_concurrently(8, try_join)

    storage.db.expire_all()
    assert results.count(True) == 3
    assert storage.get_ride(ride_id).participant_count == 3
    assert len(storage.list_participants(ride_id)) == 3


def test_concurrent_duplicate_leaves_remove_one_row(storage, make_ride):
    ride_id = make_ride().id
    storage.join_ride(ride_id, "same-rider", "Alice")

    results = _run_concurrently(6, lambda i, s: s.leave_ride(ride_id, "same-rider"))

    storage.db.expire_all()
    assert results.count(True) == 1
    assert storage.get_ride(ride_id).participant_count == 0
    assert storage.list_participants(ride_id) == []
