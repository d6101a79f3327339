from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException

from ..errors import StorageFault
from ..logs import LogContext
from ..services.quote_book import QuoteBook
from .deps import get_quote_book

router = APIRouter()


@router.get("/api/quotes")
def api_quotes_list(book: QuoteBook = Depends(get_quote_book)):
    return book.projection.to_dict()


@router.post("/api/quotes/delete")
async def api_quotes_delete(id: int = Body(..., embed=True), book: QuoteBook = Depends(get_quote_book)):
    log = LogContext("QUOTE_DELETE")
    log.set_payload({"id": id})
    try:
        await book.delete_quote(id, log)
        log.write("OK")
        return {"message": "ok", **book.projection.to_dict()}
    except StorageFault as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/quotes/speak")
def api_quotes_speak(id: int = Body(..., embed=True), book: QuoteBook = Depends(get_quote_book)):
    try:
        rec = book.speak(id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "ok", "id": rec.id}
