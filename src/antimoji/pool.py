"""Fixed-size thread worker pool draining a pre-filled queue.

Workers take one path at a time until the queue is empty or the cancel
event is set.  A path already taken is always finished, so an in-flight
atomic write is never abandoned; paths left in the queue are reported
back as undispatched.
"""

from __future__ import annotations
import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")

MAX_WORKERS = 64


def available_cpus() -> int:
    """CPUs this process may run on (affinity aware where the OS supports it)."""
    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1
    return os.cpu_count() or 1


def resolve_worker_count(requested: int) -> int:
    """``0`` means one per available CPU; negatives mean one; capped at MAX_WORKERS."""
    if requested == 0:
        requested = available_cpus()
    elif requested < 0:
        requested = 1
    return min(requested, MAX_WORKERS)


@dataclass
class PoolOutcome(Generic[T, R]):
    completed: list[R] = field(default_factory=list)
    undispatched: list[T] = field(default_factory=list)


def run_pool(
    items: list[T],
    fn: Callable[[T], R],
    workers: int,
    cancel: threading.Event | None = None,
) -> PoolOutcome[T, R]:
    """Apply ``fn`` to every item with ``workers`` threads.

    ``fn`` must not raise: per-item failures belong in its return value.
    Completed results are in completion order, not input order.
    """
    workers = resolve_worker_count(workers)
    cancel = cancel or threading.Event()

    if workers == 1 or len(items) <= 1:
        return _run_inline(items, fn, cancel)

    pending: queue.Queue[T] = queue.Queue(maxsize=len(items))
    for item in items:
        pending.put_nowait(item)

    def drain() -> list[R]:
        done: list[R] = []
        while not cancel.is_set():
            try:
                item = pending.get_nowait()
            except queue.Empty:
                break
            done.append(fn(item))
        return done

    outcome: PoolOutcome[T, R] = PoolOutcome()
    with ThreadPoolExecutor(max_workers=min(workers, len(items)),
                            thread_name_prefix="antimoji") as executor:
        futures = [executor.submit(drain) for _ in range(min(workers, len(items)))]
        for future in futures:
            outcome.completed.extend(future.result())

    while True:
        try:
            outcome.undispatched.append(pending.get_nowait())
        except queue.Empty:
            break
    return outcome


def _run_inline(items: list[T], fn: Callable[[T], R], cancel: threading.Event) -> PoolOutcome[T, R]:
    outcome: PoolOutcome[T, R] = PoolOutcome()
    for i, item in enumerate(items):
        if cancel.is_set():
            outcome.undispatched.extend(items[i:])
            break
        outcome.completed.append(fn(item))
    return outcome
