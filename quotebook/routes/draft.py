from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..errors import StorageFault
from ..logs import LogContext
from ..services.quote_book import QuoteBook
from .deps import get_quote_book

router = APIRouter()


class DraftUpdate(BaseModel):
    quote: str | None = None
    author: str | None = None


@router.get("/api/draft")
def api_draft_get(book: QuoteBook = Depends(get_quote_book)):
    return book.draft.to_dict(book.max_length)


@router.put("/api/draft")
def api_draft_update(body: DraftUpdate, book: QuoteBook = Depends(get_quote_book)):
    draft = book.update_draft(body.quote, body.author)
    return draft.to_dict(book.max_length)


@router.post("/api/draft/save", status_code=201)
async def api_draft_save(book: QuoteBook = Depends(get_quote_book)):
    log = LogContext("QUOTE_SAVE")
    log.set_payload({"source": "draft", **book.draft.to_dict(book.max_length)})
    try:
        new_id = await book.save_draft(log)
        log.write("OK")
        return {"message": "ok", "id": new_id, **book.projection.to_dict()}
    except StorageFault as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
