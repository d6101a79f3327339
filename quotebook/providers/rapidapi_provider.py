from __future__ import annotations

import logging
from typing import Tuple

import httpx

from ..errors import NetworkError

logger = logging.getLogger(__name__)


class QuoteProviderPort:
    async def fetch_random_quote(self) -> Tuple[str, str]: ...


class RapidApiQuoteProvider:
    """Thin wrapper around the quotes15 RapidAPI endpoint. One quote per call, no retry."""

    def __init__(self, url: str, host: str, api_key: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url
        self.headers = {
            "X-RapidAPI-Key": api_key,
            "X-RapidAPI-Host": host,
        }
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, cfg: dict) -> "RapidApiQuoteProvider":
        return cls(
            url=cfg["quote_api_url"],
            host=cfg["quote_api_host"],
            api_key=cfg["quote_api_key"],
            timeout=cfg["quote_api_timeout"],
        )

    async def fetch_random_quote(self) -> Tuple[str, str]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url, headers=self.headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("quote api status=%s", exc.response.status_code)
            raise NetworkError(f"quote_api_status_{exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("quote api transport error: %s", exc)
            raise NetworkError(f"quote_api_unreachable: {exc}") from exc
        except ValueError as exc:
            raise NetworkError("quote_api_invalid_json") from exc
        return parse_quote_payload(data)


def parse_quote_payload(data) -> Tuple[str, str]:
    """Pull (content, originator.name) out of a quotes15 response body."""
    if not isinstance(data, dict):
        raise NetworkError("quote_api_malformed: body is not an object")
    content = data.get("content")
    originator = data.get("originator")
    name = originator.get("name") if isinstance(originator, dict) else None
    if not isinstance(content, str) or not isinstance(name, str):
        raise NetworkError("quote_api_malformed: missing content or originator.name")
    return content, name
