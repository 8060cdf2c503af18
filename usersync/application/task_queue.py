"""Admission queue protocol and task envelope. The queue serializes every state mutation."""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Protocol

TASK_CHECK_EVENT = "check_event"
TASK_CATCH_UP = "catch_up"

TaskHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class QueuedTask:
    """A task as durably recorded in the queue. Payload must be JSON-serializable."""

    name: str
    payload: Dict[str, Any]
    task_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> str:
        return json.dumps(
            {
                "task_id": self.task_id,
                "name": self.name,
                "payload": self.payload,
                "enqueued_at": self.enqueued_at.isoformat(),
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> "QueuedTask":
        data = json.loads(raw)
        return cls(
            name=data["name"],
            payload=data.get("payload") or {},
            task_id=data["task_id"],
            enqueued_at=datetime.fromisoformat(data["enqueued_at"]),
        )


class TaskQueue(Protocol):
    """Enqueue side of the admission queue. Never waits for the task to run."""

    async def enqueue(self, name: str, payload: Dict[str, Any]) -> QueuedTask:
        ...
