"""
Quote book service: the commands the three views issue, plus the state they read.

Every mutation is followed by exactly one full scan of the store whose result
replaces the list projection. Mutations and their refreshes run under one lock,
so a refresh never lands before the write that triggered it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..domain.quote import QuoteCandidate, QuoteDraft, QuoteRecord, truncate_quote
from ..errors import StorageFault
from ..logs import LogContext
from ..providers.rapidapi_provider import QuoteProviderPort
from ..providers.speech import SpeakerPort
from .notice_svc import NoticeBoard, QUOTE_DELETED, QUOTE_SAVED
from .projection import QuoteListProjection
from .quote_store import QuoteStore

logger = logging.getLogger(__name__)


class QuoteBook:
    def __init__(
        self,
        store: QuoteStore,
        provider: QuoteProviderPort,
        speaker: SpeakerPort,
        notices: Optional[NoticeBoard] = None,
        max_length: int = 500,
    ):
        self.store = store
        self.provider = provider
        self.speaker = speaker
        self.notices = notices or NoticeBoard()
        self.max_length = max_length
        self.projection = QuoteListProjection()
        self.candidate = QuoteCandidate()
        self.draft = QuoteDraft()
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the table (StorageUnavailable propagates) and load the list."""
        await asyncio.to_thread(self.store.initialize)
        await self.refresh()

    # ---- list projection ----
    async def refresh(self) -> QuoteListProjection:
        async with self._lock:
            await self._refresh_locked()
        return self.projection

    async def _refresh_locked(self) -> None:
        records = await asyncio.to_thread(self.store.scan_all)
        self.projection.replace(records)
        logger.debug("projection refreshed: %d quotes", len(records))

    async def _refresh_after_write(self) -> Optional[str]:
        """Refresh following a committed write. A failed scan marks the list stale instead of failing the write."""
        try:
            await self._refresh_locked()
        except StorageFault as e:
            logger.warning("refresh after write failed: %s", e)
            self.projection.mark_stale()
            self.notices.show("error", f"Quote list could not be reloaded: {e}")
            return str(e)
        return None

    # ---- commands ----
    async def save_quote(self, quote_text: str, author_name: str, log: Optional[LogContext] = None) -> int:
        async with self._lock:
            try:
                new_id = await asyncio.to_thread(self.store.insert, quote_text, author_name)
            except StorageFault as e:
                self.notices.show("error", f"Could not save quote: {e}")
                raise
            refresh_err = await self._refresh_after_write()
        if log is not None:
            log.set_entity(str(new_id))
            log.set_after({"id": new_id, "quote": quote_text, "author": author_name, "refresh_error": refresh_err})
        self.notices.show("info", QUOTE_SAVED)
        return new_id

    async def save_candidate(self, log: Optional[LogContext] = None) -> int:
        cand = self.candidate
        return await self.save_quote(cand.quote_text, cand.author_name, log)

    async def save_draft(self, log: Optional[LogContext] = None) -> int:
        draft = self.draft
        # the form is cleared as soon as the save is issued
        self.draft = QuoteDraft()
        return await self.save_quote(draft.quote_text, draft.author_name, log)

    async def delete_quote(self, quote_id: int, log: Optional[LogContext] = None) -> None:
        async with self._lock:
            try:
                await asyncio.to_thread(self.store.delete, quote_id)
            except StorageFault as e:
                self.notices.show("error", f"Could not delete quote: {e}")
                raise
            refresh_err = await self._refresh_after_write()
        if log is not None:
            log.set_entity(str(quote_id))
            log.set_after({"remaining": len(self.projection), "refresh_error": refresh_err})
        self.notices.show("info", QUOTE_DELETED)

    async def fetch_random_quote(self, log: Optional[LogContext] = None) -> QuoteCandidate:
        """Replace the candidate with a fresh remote quote; NetworkError leaves it as is."""
        quote_text, author_name = await self.provider.fetch_random_quote()
        self.candidate = QuoteCandidate(quote_text=quote_text, author_name=author_name)
        if log is not None:
            log.set_after(self.candidate.to_dict())
        return self.candidate

    def update_draft(self, quote_text: Optional[str] = None, author_name: Optional[str] = None) -> QuoteDraft:
        self.draft = QuoteDraft(
            quote_text=truncate_quote(quote_text, self.max_length) if quote_text is not None else self.draft.quote_text,
            author_name=author_name if author_name is not None else self.draft.author_name,
        )
        return self.draft

    def speak(self, quote_id: int) -> QuoteRecord:
        rec = self.projection.find(quote_id)
        if rec is None:
            raise LookupError("quote_not_found")
        self.speaker.speak(rec.quote_text)
        return rec
