from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol
from uuid import uuid4


class Category(str, Enum):
    TRANSFER = "transfer"
    INJURY = "injury"
    CONTRACT = "contract"
    MATCH = "match"
    FINANCE = "finance"
    MORALE = "morale"
    ACHIEVEMENT = "achievement"
    NEWS = "news"
    SYSTEM = "system"


class Priority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


PRIORITY_ORDER = {Priority.URGENT: 0, Priority.HIGH: 1, Priority.NORMAL: 2, Priority.LOW: 3}


@dataclass(slots=True)
class Notification:
    title: str
    message: str
    category: Category
    priority: Priority = Priority.NORMAL
    read: bool = False
    notification_id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationSink(Protocol):
    def append(self, title: str, message: str, category: Category, priority: Priority) -> None: ...


class Inbox:
    """In-memory notification sink, newest last."""

    def __init__(self) -> None:
        self._items: list[Notification] = []

    def append(self, title: str, message: str, category: Category, priority: Priority) -> None:
        self._items.append(Notification(title=title, message=message, category=category, priority=priority))

    def __len__(self) -> int:
        return len(self._items)

    def all(self) -> list[Notification]:
        return list(self._items)

    def unread(self) -> list[Notification]:
        return [n for n in self._items if not n.read]

    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.read)

    def by_category(self, category: Category) -> list[Notification]:
        return [n for n in self._items if n.category == category]

    def by_priority(self) -> list[Notification]:
        return sorted(self._items, key=lambda n: PRIORITY_ORDER[n.priority])

    def mark_read(self, notification_id: str) -> bool:
        for item in self._items:
            if item.notification_id == notification_id:
                item.read = True
                return True
        return False

    def mark_all_read(self) -> None:
        for item in self._items:
            item.read = True


def contract_priority(months_left: int) -> Priority:
    return Priority.URGENT if months_left <= 0 else Priority.HIGH
