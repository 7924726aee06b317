"""ESV API adapter implementing the passage fetcher port."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Optional

import httpx

from passage_resolver.core.config import Settings
from passage_resolver.core.config import settings as default_settings
from passage_resolver.core.logging import get_logger
from passage_resolver.core.models import FetchResult
from passage_resolver.core.ports import PassageFetcherPort

logger = get_logger(__name__)

# Flags the converter relies on: numbered verses, no echoed reference line.
ESV_QUERY_FLAGS: dict[str, str] = {
    "include-passage-references": "false",
    "include-verse-numbers": "true",
    "include-first-verse-numbers": "true",
    "include-footnotes": "true",
    "include-headings": "true",
}

_AUTH_FAILURES = (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN)

NETWORK_ERROR_MESSAGE = (
    "An error occurred when trying to access the ESV API. "
    "Please check your internet connection and API token."
)


def _status_message(status_code: int) -> str:
    return (
        f"Failed to load the passage from the ESV API. Status: {status_code}. "
        "Please check your API token."
    )


class EsvFetcher(PassageFetcherPort):
    """Fetch passages from ``api.esv.org`` with a single GET per call, never retrying."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        app_settings: Optional[Settings] = None,
    ) -> None:
        cfg = app_settings or default_settings
        self._base_url = base_url or cfg.ESV_API_BASE_URL
        self._timeout = timeout if timeout is not None else cfg.ESV_REQUEST_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def build_params(self, reference: str) -> dict[str, str]:
        return {"q": reference, **ESV_QUERY_FLAGS}

    async def fetch_passage(self, reference: str, credential: str) -> FetchResult:
        headers = {"Authorization": f"Token {credential}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(
                    self._base_url, params=self.build_params(reference), headers=headers
                )
        except httpx.TimeoutException as exc:
            logger.warning("[esv] request for %r timed out: %s", reference, exc)
            return FetchResult.failure(0, NETWORK_ERROR_MESSAGE)
        except httpx.RequestError as exc:
            logger.warning("[esv] request for %r failed: %s", reference, exc)
            return FetchResult.failure(0, NETWORK_ERROR_MESSAGE)

        status = response.status_code
        if status != HTTPStatus.OK:
            logger.warning(
                "[esv] %r answered %s: %s",
                reference,
                status,
                response.text[:200] if response.text else "(no body)",
            )
            return FetchResult.failure(
                status, _status_message(status), auth_failed=status in _AUTH_FAILURES
            )

        try:
            payload: Any = response.json()
        except ValueError:
            logger.warning("[esv] %r returned a non-JSON body", reference)
            return FetchResult.failure(status, "The ESV API returned an unreadable response.")
        if not isinstance(payload, dict):
            return FetchResult.failure(status, "The ESV API returned an unexpected response.")

        logger.info("[esv] fetched %r (canonical=%r)", reference, payload.get("canonical"))
        return FetchResult.success(payload, status)


__all__ = ["EsvFetcher", "ESV_QUERY_FLAGS", "NETWORK_ERROR_MESSAGE"]
