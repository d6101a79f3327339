from __future__ import annotations

# quotebook/services/notice_svc.py
import itertools
import time
from dataclasses import dataclass
from typing import Callable

QUOTE_SAVED = "Quote saved"
QUOTE_DELETED = "Quote deleted"


@dataclass
class Notice:
    id: int
    kind: str
    message: str
    expires_at: float

    def to_dict(self) -> dict:
        return {"id": self.id, "kind": self.kind, "message": self.message}


class NoticeBoard:
    """Short-lived confirmation messages that dismiss themselves."""

    def __init__(self, duration_ms: int = 2000, clock: Callable[[], float] = time.monotonic):
        self.duration_ms = duration_ms
        self._clock = clock
        self._ids = itertools.count(1)
        self._notices: list[Notice] = []

    def show(self, kind: str, message: str) -> Notice:
        self._prune()
        n = Notice(
            id=next(self._ids),
            kind=kind,
            message=message,
            expires_at=self._clock() + self.duration_ms / 1000.0,
        )
        self._notices.append(n)
        return n

    def _prune(self) -> None:
        now = self._clock()
        self._notices = [n for n in self._notices if n.expires_at > now]

    def active(self) -> list[Notice]:
        self._prune()
        return list(self._notices)

    def dismiss(self, notice_id: int | None = None) -> None:
        if notice_id is None:
            self._notices = []
        else:
            self._notices = [n for n in self._notices if n.id != notice_id]
