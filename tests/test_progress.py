"""Tests for progress counting and ETA."""

import threading
from datetime import timedelta

from subsystem_audit.validation import ProgressTracker


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_eta_from_average():
    clock = FakeClock()
    tracker = ProgressTracker(4, clock=clock)

    clock.now += 10.0
    snapshot = tracker.complete()

    assert snapshot.completed == 1
    assert snapshot.total == 4
    assert snapshot.per_subsystem == timedelta(seconds=10)
    assert snapshot.remaining == timedelta(seconds=30)


def test_skip_shrinks_total():
    tracker = ProgressTracker(3, clock=FakeClock())

    tracker.skip()
    tracker.complete()
    snapshot = tracker.complete()

    assert snapshot.total == 2
    assert snapshot.remaining == timedelta(0)


def test_remaining_never_negative():
    tracker = ProgressTracker(1, clock=FakeClock())

    tracker.complete()
    snapshot = tracker.complete()

    assert snapshot.remaining == timedelta(0)


def test_concurrent_completions_counted_once_each():
    tracker = ProgressTracker(200)
    snapshots = []
    lock = threading.Lock()

    def worker():
        for _ in range(25):
            snapshot = tracker.complete()
            with lock:
                snapshots.append(snapshot.completed)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert tracker.completed == 200
    assert sorted(snapshots) == list(range(1, 201))
