# quotebook/services/config_svc.py
import os

from ..db import get_conn, read_config_yaml
from ..logs import LogContext

DDL = """
CREATE TABLE IF NOT EXISTS config (
  key TEXT PRIMARY KEY,
  value TEXT
)
"""

DEFAULTS = {
    "quote_api_url": "https://quotes15.p.rapidapi.com/quotes/random/",
    "quote_api_host": "quotes15.p.rapidapi.com",
    # RapidAPI key; leave empty here and set it via config.yaml / QUOTEBOOK_API_KEY
    "quote_api_key": "",
    "quote_api_timeout": "10",
    "quote_max_length": "500",
    "notice_duration_ms": "2000",
    "fetch_on_startup": "1",
}

_NUMERIC = {"quote_api_timeout": float, "quote_max_length": int, "notice_duration_ms": int}


def ensure_default_config():
    """Make sure every key exists (never overwrites stored values)."""
    with get_conn() as conn:
        conn.execute(DDL)
        for k, v in DEFAULTS.items():
            conn.execute(
                "INSERT INTO config(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO NOTHING",
                (k, v),
            )


def _to_bool(v: str) -> bool:
    return str(v).strip().lower() in ("1", "true", "yes", "on")


def get_config() -> dict:
    with get_conn() as conn:
        rows = conn.execute("SELECT key, value FROM config").fetchall()
    cfg = {r["key"]: r["value"] for r in rows}

    # the key from the environment or config.yaml wins over the stored one
    api_key = (
        os.environ.get("QUOTEBOOK_API_KEY")
        or read_config_yaml().get("quote_api_key")
        or cfg.get("quote_api_key", DEFAULTS["quote_api_key"])
    )

    out = {
        "quote_api_url": cfg.get("quote_api_url", DEFAULTS["quote_api_url"]),
        "quote_api_host": cfg.get("quote_api_host", DEFAULTS["quote_api_host"]),
        "quote_api_key": api_key or "",
        "quote_api_timeout": float(cfg.get("quote_api_timeout", DEFAULTS["quote_api_timeout"])),
        "quote_max_length": int(cfg.get("quote_max_length", DEFAULTS["quote_max_length"])),
        "notice_duration_ms": int(cfg.get("notice_duration_ms", DEFAULTS["notice_duration_ms"])),
        "fetch_on_startup": _to_bool(cfg.get("fetch_on_startup", DEFAULTS["fetch_on_startup"])),
    }
    return out


def _normalize(k: str, v) -> str:
    """Return the string that will be stored for k, or raise ValueError."""
    if k == "fetch_on_startup":
        if isinstance(v, bool):
            return "1" if v else "0"
        s = str(v).strip().lower()
        if s not in ("1", "0", "true", "false", "yes", "no", "on", "off"):
            raise ValueError(f"invalid_{k}: {v!r}")
        return "1" if _to_bool(s) else "0"
    if k in _NUMERIC:
        # bool is an int subclass; "True" would never parse back
        if isinstance(v, bool):
            raise ValueError(f"invalid_{k}: {v!r}")
        s = str(v).strip()
        try:
            _NUMERIC[k](s)
        except ValueError:
            raise ValueError(f"invalid_{k}: {v!r}")
        return s
    if v is None or isinstance(v, (dict, list)):
        raise ValueError(f"invalid_{k}: {v!r}")
    return str(v)


def update_config(upd: dict, log: LogContext) -> list[str]:
    unknown = [k for k in upd if k not in DEFAULTS]
    if unknown:
        raise ValueError(f"unknown_config_keys: {','.join(sorted(unknown))}")
    values = {k: _normalize(k, v) for k, v in upd.items()}
    updated = []
    with get_conn() as conn:
        for k, v in values.items():
            conn.execute(
                "INSERT INTO config(key,value) VALUES(?,?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (k, v)
            )
            updated.append(k)
    log.set_after({k: ("***masked***" if k == "quote_api_key" else v) for k, v in values.items()})
    return updated
