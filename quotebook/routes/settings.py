from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..logs import LogContext
from ..services.config_svc import get_config, update_config
from ..services.quote_book import QuoteBook
from .deps import get_quote_book

router = APIRouter()


@router.get("/api/settings/get")
def api_settings_get():
    out = dict(get_config())
    if out.get("quote_api_key"):
        out["quote_api_key"] = "***masked***"
    return out


class SettingsUpdateBody(BaseModel):
    updates: dict


@router.post("/api/settings/update")
def api_settings_update(body: SettingsUpdateBody, book: QuoteBook = Depends(get_quote_book)):
    log = LogContext("SETTINGS_UPDATE")
    log.set_payload({"keys": sorted(body.updates)})
    try:
        updated_keys = update_config(body.updates, log)
        log.write("OK")
    except ValueError as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=400, detail=str(e))
    # form cap and notice duration apply right away; API settings on next start
    cfg = get_config()
    book.max_length = cfg["quote_max_length"]
    book.notices.duration_ms = cfg["notice_duration_ms"]
    return {"message": "ok", "updated": updated_keys}
