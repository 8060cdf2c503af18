"""Unit tests for AdmissionQueue over an in-memory Redis list backend: FIFO, retries, dead-lettering, crash recovery."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from usersync.application.exceptions import (
    NonRetriableError,
    QueueUnavailableError,
    TaskFailedError,
)
from usersync.infrastructure.queue.admission_queue import AdmissionQueue, backoff_delay


class PermanentError(NonRetriableError):
    pass


async def test_enqueue_returns_without_running(admission_queue, queue_backend):
    ran = []

    async def handler(payload):
        ran.append(payload)

    admission_queue.register("job", handler)

    task = await admission_queue.enqueue("job", {"n": 1})

    assert ran == []
    assert queue_backend.tasks("test:pending")[0]["task_id"] == task.task_id
    assert await admission_queue.depth() == {"pending": 1, "processing": 0, "failed": 0}


async def test_tasks_run_in_fifo_order(admission_queue, drain_queue):
    ran = []

    async def handler(payload):
        ran.append(payload["n"])

    admission_queue.register("job", handler)
    for n in range(5):
        await admission_queue.enqueue("job", {"n": n})

    assert await drain_queue(admission_queue) == 5
    assert ran == [0, 1, 2, 3, 4]
    assert await admission_queue.depth() == {"pending": 0, "processing": 0, "failed": 0}


async def test_transient_failure_is_retried(admission_queue):
    handler = AsyncMock(side_effect=[RuntimeError("db down"), RuntimeError("db down"), None])
    admission_queue.register("job", handler)
    await admission_queue.enqueue("job", {})

    await admission_queue.process_next(timeout=0)

    assert handler.await_count == 3
    assert await admission_queue.depth() == {"pending": 0, "processing": 0, "failed": 0}


async def test_exhausted_retries_dead_letter(admission_queue, queue_backend):
    handler = AsyncMock(side_effect=RuntimeError("still down"))
    admission_queue.register("job", handler)
    await admission_queue.enqueue("job", {"n": 1})

    with pytest.raises(TaskFailedError) as exc_info:
        await admission_queue.process_next(timeout=0)

    assert exc_info.value.attempts == 3
    assert handler.await_count == 3
    failed = queue_backend.tasks("test:failed")
    assert len(failed) == 1
    assert failed[0]["attempts"] == 3
    assert json.loads(failed[0]["task"])["payload"] == {"n": 1}
    assert await admission_queue.depth() == {"pending": 0, "processing": 0, "failed": 1}


async def test_non_retriable_error_dead_letters_immediately(admission_queue):
    handler = AsyncMock(side_effect=PermanentError("bad credentials"))
    admission_queue.register("job", handler)
    await admission_queue.enqueue("job", {})

    with pytest.raises(TaskFailedError):
        await admission_queue.process_next(timeout=0)

    assert handler.await_count == 1


async def test_unknown_task_name_dead_letters(admission_queue):
    await admission_queue.enqueue("nobody_handles_this", {})

    with pytest.raises(TaskFailedError):
        await admission_queue.process_next(timeout=0)

    assert (await admission_queue.depth())["failed"] == 1


async def test_unparseable_entry_dead_letters(admission_queue, queue_backend):
    await queue_backend.push("test:pending", "not json")

    with pytest.raises(TaskFailedError):
        await admission_queue.process_next(timeout=0)

    assert await admission_queue.depth() == {"pending": 0, "processing": 0, "failed": 1}


async def test_recover_returns_orphans_to_head_in_order(admission_queue, queue_backend, drain_queue):
    ran = []

    async def handler(payload):
        ran.append(payload["n"])

    admission_queue.register("job", handler)
    for n in range(3):
        await admission_queue.enqueue("job", {"n": n})
    # Simulate a crash after the worker claimed the first two tasks.
    for _ in range(2):
        await queue_backend.move_head_blocking("test:pending", "test:processing", 0)

    assert await admission_queue.recover() == 2
    await drain_queue(admission_queue)

    assert ran == [0, 1, 2]


async def test_enqueue_backend_failure_raises_queue_unavailable():
    backend = AsyncMock()
    backend.push.side_effect = ConnectionError("redis down")
    queue = AdmissionQueue(backend=backend, name="test")

    with pytest.raises(QueueUnavailableError):
        await queue.enqueue("job", {})


async def test_worker_processes_tasks_one_at_a_time(admission_queue):
    active = 0
    max_active = 0
    done = asyncio.Event()
    count = 0

    async def handler(payload):
        nonlocal active, max_active, count
        active += 1
        max_active = max(max_active, active)
        await asyncio.sleep(0.001)
        active -= 1
        count += 1
        if count == 10:
            done.set()

    admission_queue.register("job", handler)
    await asyncio.gather(*(admission_queue.enqueue("job", {"n": n}) for n in range(10)))

    admission_queue.start()
    try:
        await asyncio.wait_for(done.wait(), timeout=5)
    finally:
        await admission_queue.stop()

    assert max_active == 1
    assert count == 10


def test_backoff_delay_grows_and_caps():
    assert backoff_delay(1, 1.0, 30.0, jitter=0) == 1.0
    assert backoff_delay(3, 1.0, 30.0, jitter=0) == 4.0
    assert backoff_delay(10, 1.0, 30.0, jitter=0) == 30.0
    assert 0.7 <= backoff_delay(1, 1.0, 30.0, jitter=0.3) <= 1.3
