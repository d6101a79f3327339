from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from ..services.quote_book import QuoteBook
from .deps import get_quote_book

router = APIRouter()


@router.get("/api/notices")
def api_notices(book: QuoteBook = Depends(get_quote_book)):
    return {"items": [n.to_dict() for n in book.notices.active()]}


@router.post("/api/notices/dismiss")
def api_notices_dismiss(id: int | None = Body(None, embed=True), book: QuoteBook = Depends(get_quote_book)):
    book.notices.dismiss(id)
    return {"message": "ok"}
