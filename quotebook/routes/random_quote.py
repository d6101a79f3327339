from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..errors import NetworkError, StorageFault
from ..logs import LogContext
from ..services.quote_book import QuoteBook
from .deps import get_quote_book

router = APIRouter()


@router.get("/api/random")
def api_random_get(book: QuoteBook = Depends(get_quote_book)):
    return book.candidate.to_dict()


@router.post("/api/random/fetch")
async def api_random_fetch(book: QuoteBook = Depends(get_quote_book)):
    log = LogContext("QUOTE_FETCH")
    try:
        cand = await book.fetch_random_quote(log)
        log.write("OK")
        return cand.to_dict()
    except NetworkError as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/api/random/save", status_code=201)
async def api_random_save(book: QuoteBook = Depends(get_quote_book)):
    log = LogContext("QUOTE_SAVE")
    log.set_payload({"source": "random", **book.candidate.to_dict()})
    try:
        new_id = await book.save_candidate(log)
        log.write("OK")
        return {"message": "ok", "id": new_id, **book.projection.to_dict()}
    except StorageFault as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
