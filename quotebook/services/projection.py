from __future__ import annotations

from typing import Iterable, Iterator

from ..domain.quote import QuoteRecord


class QuoteListProjection:
    """In-memory mirror of the saved quotes, read by the list view.

    Only ever replaced wholesale from a completed scan of the store.
    """

    def __init__(self):
        self._items: tuple[QuoteRecord, ...] = ()
        self._version = 0
        self._stale = False

    @property
    def items(self) -> tuple[QuoteRecord, ...]:
        return self._items

    @property
    def version(self) -> int:
        return self._version

    @property
    def stale(self) -> bool:
        return self._stale

    def replace(self, records: Iterable[QuoteRecord]) -> None:
        self._items = tuple(records)
        self._version += 1
        self._stale = False

    def mark_stale(self) -> None:
        """The store changed but the scan that should follow it failed."""
        self._stale = True

    def find(self, quote_id: int) -> QuoteRecord | None:
        for rec in self._items:
            if rec.id == quote_id:
                return rec
        return None

    def to_dict(self) -> dict:
        return {"items": [r.to_dict() for r in self._items], "version": self._version, "stale": self._stale}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[QuoteRecord]:
        return iter(self._items)
