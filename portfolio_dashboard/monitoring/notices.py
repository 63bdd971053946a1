"""Transient user-facing notices (the dashboard's banner messages)."""

from __future__ import annotations

import enum
import itertools
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List

Clock = Callable[[], float]


class NoticeLevel(str, enum.Enum):
    INFO = 'INFO'
    WARNING = 'WARNING'
    CRITICAL = 'CRITICAL'


@dataclass(frozen=True)
class Notice:
    notice_id: int
    message: str
    level: NoticeLevel
    created_at: float
    expires_at: float

    def is_active(self, now: float) -> bool:
        return now < self.expires_at


class NoticeBoard:
    """In-memory notice buffer whose entries expire after `duration` seconds.

    Posted from the event loop and read from the dashboard API thread, so
    every access to the buffer holds `_lock`.
    """

    def __init__(self, duration: float = 5.0, max_notices: int = 20, clock: Clock = time.monotonic) -> None:
        self._duration = duration
        self._clock = clock
        self._notices: Deque[Notice] = deque(maxlen=max_notices)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def duration(self) -> float:
        return self._duration

    def post(self, message: str, level: NoticeLevel = NoticeLevel.INFO) -> Notice:
        with self._lock:
            now = self._clock()
            notice = Notice(
                notice_id=next(self._ids),
                message=message,
                level=level,
                created_at=now,
                expires_at=now + self._duration,
            )
            self._notices.append(notice)
        return notice

    def active(self) -> List[Notice]:
        with self._lock:
            now = self._clock()
            while self._notices and not self._notices[0].is_active(now):
                self._notices.popleft()
            return [notice for notice in self._notices if notice.is_active(now)]

    def dismiss(self, notice_id: int) -> bool:
        with self._lock:
            for notice in self._notices:
                if notice.notice_id == notice_id:
                    self._notices.remove(notice)
                    return True
        return False

    def clear(self) -> None:
        with self._lock:
            self._notices.clear()


__all__ = ['Notice', 'NoticeBoard', 'NoticeLevel']
