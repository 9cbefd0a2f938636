"""
Data models for the SiteAudit crawler.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Protocol


@dataclass(frozen=True, slots=True)
class Task:
    """A page waiting to be fetched: resolved URL and hop count from the seed."""

    url: str
    depth: int = 0


class TaskQueue:
    """FIFO of pending tasks. Not synchronised; the audit lock guards it."""

    def __init__(self) -> None:
        self._items: Deque[Task] = deque()

    def enqueue(self, task: Task) -> None:
        self._items.append(task)

    def dequeue(self) -> Task:
        """Pop the oldest task; raises IndexError when empty."""
        return self._items.popleft()

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


class Response(Protocol):
    """What a fetcher hands back: a status code and a body read once, then released."""

    @property
    def status(self) -> int: ...

    async def read(self) -> bytes: ...

    def release(self) -> None: ...
