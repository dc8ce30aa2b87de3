"""Shared helpers for the concurrency tests."""

import threading
from typing import Any, Callable, List

INITIALIZED_EVENT = "Singleton initialized"


def run_concurrently(target: Callable[[], Any], count: int) -> List[Any]:
    """Start ``count`` threads behind a barrier and collect their results."""
    barrier = threading.Barrier(count)
    results: List[Any] = [None] * count
    errors: List[BaseException] = []

    def worker(index: int) -> None:
        barrier.wait()
        try:
            results[index] = target()
        except BaseException as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    if errors:
        raise errors[0]
    return results


def initialized_events(caplog) -> List[dict]:
    """Structured 'Singleton initialized' events captured by caplog."""
    return [
        record.msg
        for record in caplog.records
        if isinstance(record.msg, dict) and record.msg.get("event") == INITIALIZED_EVENT
    ]
