from __future__ import annotations

from fastapi import Request

from ..services.quote_book import QuoteBook


def get_quote_book(request: Request) -> QuoteBook:
    return request.app.state.quote_book
