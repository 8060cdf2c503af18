"""Durable single-worker admission queue on Redis lists. Strict FIFO, one task in flight, retry with backoff."""

import asyncio
import json
import logging
import random
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from usersync.application.exceptions import (
    NonRetriableError,
    QueueUnavailableError,
    TaskFailedError,
    UnknownTaskError,
)
from usersync.application.task_queue import QueuedTask, TaskHandler
from usersync.core.context import task_id_ctx

logger = logging.getLogger(__name__)


class QueueBackend(Protocol):
    """Minimal Redis list operations for the queue. Injected; no global state."""

    async def push(self, key: str, value: str) -> int: ...
    async def move_head_blocking(self, src: str, dst: str, timeout: float) -> str | None: ...
    async def move_tail_to_head(self, src: str, dst: str) -> str | None: ...
    async def remove(self, key: str, value: str) -> int: ...
    async def length(self, key: str) -> int: ...


def backoff_delay(attempt: int, base: float, cap: float, jitter: float = 0.3) -> float:
    """Exponential backoff with jitter for the given 1-based attempt number."""
    delay = min(base * (2 ** (attempt - 1)), cap)
    jitter_amount = delay * jitter
    return max(0.0, delay + random.uniform(-jitter_amount, jitter_amount))


class AdmissionQueue:
    """
    Pending tasks live in `<name>:pending`. The worker atomically moves the head to
    `<name>:processing`, runs it, and removes it on success, so a crash mid-task
    leaves it in processing; recover() puts it back at the head of pending.
    Tasks that exhaust the retry budget go to `<name>:failed`.

    Only one worker may run per queue name. Execution is at-least-once: handlers
    must be idempotent.
    """

    def __init__(
        self,
        backend: QueueBackend,
        name: str = "usersync",
        max_attempts: int = 5,
        backoff_base_seconds: float = 0.5,
        backoff_max_seconds: float = 30.0,
        poll_timeout_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._backend = backend
        self._pending_key = f"{name}:pending"
        self._processing_key = f"{name}:processing"
        self._failed_key = f"{name}:failed"
        self._max_attempts = max(1, max_attempts)
        self._backoff_base = backoff_base_seconds
        self._backoff_max = backoff_max_seconds
        self._poll_timeout = poll_timeout_seconds
        self._sleep = sleep
        self._handlers: Dict[str, TaskHandler] = {}
        self._worker: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()

    # ------------------------------------------------------------------
    # Enqueue side
    # ------------------------------------------------------------------

    async def enqueue(self, name: str, payload: Dict[str, Any]) -> QueuedTask:
        """Durably append a task. Returns once recorded; never waits for execution."""
        task = QueuedTask(name=name, payload=payload)
        try:
            await self._backend.push(self._pending_key, task.to_json())
        except Exception as e:
            logger.error("task_enqueue_failed", extra={"task_name": name, "error": str(e)})
            raise QueueUnavailableError(f"Could not enqueue {name}: {e}") from e
        logger.debug("task_enqueued", extra={"task_name": name, "task_id": task.task_id})
        return task

    async def depth(self) -> Dict[str, int]:
        return {
            "pending": await self._backend.length(self._pending_key),
            "processing": await self._backend.length(self._processing_key),
            "failed": await self._backend.length(self._failed_key),
        }

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def register(self, name: str, handler: TaskHandler) -> None:
        self._handlers[name] = handler

    def register_all(self, handlers: Dict[str, TaskHandler]) -> None:
        for name, handler in handlers.items():
            self.register(name, handler)

    async def recover(self) -> int:
        """Return tasks orphaned in processing by a crash to the head of pending, preserving order."""
        recovered = 0
        while await self._backend.move_tail_to_head(self._processing_key, self._pending_key) is not None:
            recovered += 1
        if recovered:
            logger.warning("tasks_recovered", extra={"count": recovered})
        return recovered

    async def process_next(self, timeout: Optional[float] = None) -> Optional[QueuedTask]:
        """
        Run the head task to completion (with retries). Returns the task, or None if
        the queue stayed empty for timeout seconds. Raises TaskFailedError after the
        task has been dead-lettered.
        """
        raw = await self._backend.move_head_blocking(
            self._pending_key,
            self._processing_key,
            self._poll_timeout if timeout is None else timeout,
        )
        if raw is None:
            return None

        try:
            task = QueuedTask.from_json(raw)
        except (ValueError, KeyError, TypeError) as e:
            await self._dead_letter(raw, None, 0, e)
            raise TaskFailedError("<unparseable>", "<unknown>", 0, e) from e

        token = task_id_ctx.set(task.task_id)
        try:
            await self._run_with_retries(raw, task)
        finally:
            task_id_ctx.reset(token)
        return task

    async def _run_with_retries(self, raw: str, task: QueuedTask) -> None:
        handler = self._handlers.get(task.name)
        attempt = 0
        while True:
            attempt += 1
            try:
                if handler is None:
                    raise UnknownTaskError(f"No handler registered for task {task.name}")
                await handler(task.payload)
            except Exception as e:
                retriable = not isinstance(e, NonRetriableError)
                if retriable and attempt < self._max_attempts:
                    delay = backoff_delay(attempt, self._backoff_base, self._backoff_max)
                    logger.warning(
                        "task_retry",
                        extra={
                            "task_name": task.name,
                            "attempt": attempt,
                            "max_attempts": self._max_attempts,
                            "delay_seconds": round(delay, 3),
                            "error": str(e),
                        },
                    )
                    await self._sleep(delay)
                    continue
                await self._dead_letter(raw, task, attempt, e)
                raise TaskFailedError(task.name, task.task_id, attempt, e) from e
            await self._backend.remove(self._processing_key, raw)
            logger.info("task_completed", extra={"task_name": task.name, "attempt": attempt})
            return

    async def _dead_letter(
        self,
        raw: str,
        task: Optional[QueuedTask],
        attempts: int,
        error: BaseException,
    ) -> None:
        record = json.dumps(
            {
                "task": raw,
                "attempts": attempts,
                "error": f"{type(error).__name__}: {error}",
                "failed_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        await self._backend.push(self._failed_key, record)
        await self._backend.remove(self._processing_key, raw)
        logger.error(
            "task_failed",
            extra={
                "task_name": task.name if task else None,
                "attempts": attempts,
                "error": str(error),
            },
        )

    async def run(self) -> None:
        """Single consumer loop. Runs until stop() is called."""
        await self.recover()
        while not self._stopping.is_set():
            try:
                await self.process_next()
            except TaskFailedError:
                # Already dead-lettered and logged; the next trigger resumes from the ledger cursor.
                continue
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("queue_worker_error", extra={"error": str(e)}, exc_info=True)
                await self._sleep(self._backoff_base)

    def start(self) -> asyncio.Task:
        if self._worker is None or self._worker.done():
            self._stopping.clear()
            self._worker = asyncio.create_task(self.run(), name=f"{self._pending_key}-worker")
        return self._worker

    async def stop(self) -> None:
        self._stopping.set()
        if self._worker is not None:
            try:
                await asyncio.wait_for(self._worker, timeout=self._poll_timeout + 5)
            except asyncio.TimeoutError:
                self._worker.cancel()
            self._worker = None
