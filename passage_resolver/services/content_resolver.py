"""Resolution policy: parse, look up locally, fall back to the remote source."""

from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional
from uuid import uuid4

from passage_resolver.core.books import BookNameRegistry, registry
from passage_resolver.core.config import Settings
from passage_resolver.core.config import settings as default_settings
from passage_resolver.core.exceptions import FormatError, RemoteFetchError
from passage_resolver.core.logging import (
    bind_correlation_id,
    get_correlation_id,
    get_logger,
    reset_correlation_id,
)
from passage_resolver.core.models import (
    FetchResult,
    Locator,
    Passage,
    Resolution,
    ResolutionStatus,
)
from passage_resolver.core.ports import PassageFetcherPort
from passage_resolver.services.content_store import ContentStore
from passage_resolver.services.reference_parser import ReferenceParser, default_parser

logger = get_logger(__name__)

MISSING_CREDENTIAL_MESSAGE = (
    "To display Bible passages, you need to set up an ESV API token (ESV_API_TOKEN)."
)
API_ERROR_MESSAGE = "Failed to load the passage from the ESV API."
WHOLE_BOOK_VERSES = "1:1-999"

SOURCE_LOCAL = "local"
SOURCE_REMOTE = "remote"


class ContentResolver:
    """Turns citation strings into :class:`Resolution` results.

    Failures are returned as tagged results, never raised. A resolution makes
    at most one call to the fetcher.
    """

    def __init__(
        self,
        store: ContentStore,
        *,
        parser: Optional[ReferenceParser] = None,
        fetcher: Optional[PassageFetcherPort] = None,
        credential: Optional[str] = None,
        download_on_demand: bool = True,
        version: Optional[str] = None,
        books: BookNameRegistry = registry,
    ) -> None:
        self._store = store
        self._parser = parser or default_parser
        self._fetcher = fetcher
        self._credential = credential.strip() if credential else None
        self._download_on_demand = download_on_demand
        self._version = version
        self._books = books

    @classmethod
    def from_settings(
        cls,
        store: ContentStore,
        fetcher: Optional[PassageFetcherPort] = None,
        app_settings: Optional[Settings] = None,
    ) -> "ContentResolver":
        cfg = app_settings or default_settings
        return cls(
            store,
            fetcher=fetcher,
            credential=cfg.ESV_API_TOKEN if cfg.has_esv_credential else None,
            download_on_demand=cfg.DOWNLOAD_ON_DEMAND,
            version=cfg.PREFERRED_BIBLE_VERSION,
        )

    @property
    def store(self) -> ContentStore:
        return self._store

    @property
    def fetch_enabled(self) -> bool:
        return self._download_on_demand and self._fetcher is not None

    def remote_query(self, locator: Locator) -> str:
        """Reference string sent to the remote source for ``locator``.

        Whole-chapter requests for one-chapter books ask for every verse
        explicitly; otherwise the remote source answers with verse 1 only.
        """
        if locator.is_chapter_reference and not locator.is_chapter_range:
            if self._books.chapter_count(locator.book) == 1:
                return f"{locator.book} {WHOLE_BOOK_VERSES}"
        return locator.canonical

    async def get_content(self, text: str) -> Resolution:
        """Resolve ``text`` to a passage or a tagged failure."""
        if text is None:
            raise TypeError("text must be a string")
        token = None
        if get_correlation_id() is None:
            token = bind_correlation_id(uuid4().hex)
        try:
            return await self._resolve(text)
        finally:
            if token is not None:
                reset_correlation_id(token)

    async def get_contents(self, texts: Iterable[str]) -> List[Resolution]:
        """Resolve several citations concurrently, preserving input order."""
        return list(await asyncio.gather(*(self.get_content(text) for text in texts)))

    async def _resolve(self, text: str) -> Resolution:
        outcome = self._parser.parse_detailed(text)
        if outcome.locator is None:
            status = outcome.status or ResolutionStatus.INVALID_REFERENCE
            logger.info("[resolver] %s for %r: %s", status.value, text, outcome.reason)
            return Resolution.failure(
                status, text, f"Reference not understood: {text.strip()!r} ({outcome.reason})"
            )

        locator = outcome.locator
        local = self._store.lookup(locator)
        if local is not None and not local.is_empty:
            logger.info("[resolver] %s served from local store (%d verses)", locator, len(local.verses))
            return Resolution.found(text, local, SOURCE_LOCAL)

        if not self.fetch_enabled:
            logger.info("[resolver] %s not found locally and fetching is disabled", locator)
            return Resolution.failure(
                ResolutionStatus.NOT_FOUND, text, f"No content found for {locator}."
            )

        if not self._credential:
            logger.warning("[resolver] %s needs a remote fetch but no credential is set", locator)
            return Resolution.failure(
                ResolutionStatus.MISSING_CREDENTIAL,
                text,
                MISSING_CREDENTIAL_MESSAGE,
                passage=Passage(reference=locator, missing_credential=True),
            )

        return await self._fetch(text, locator, self._fetcher, self._credential)

    async def _fetch(
        self, text: str, locator: Locator, fetcher: PassageFetcherPort, credential: str
    ) -> Resolution:
        query = self.remote_query(locator)
        logger.info("[resolver] fetching %s remotely as %r", locator, query)
        try:
            result: FetchResult = await fetcher.fetch_passage(query, credential)
        except RemoteFetchError as exc:
            logger.warning("[resolver] remote fetch for %s raised: %s", locator, exc)
            return Resolution.failure(
                ResolutionStatus.API_ERROR, text, str(exc), status_code=exc.status_code
            )

        if not result.ok:
            logger.warning(
                "[resolver] remote fetch for %s failed with status %s", locator, result.status_code
            )
            return Resolution.failure(
                ResolutionStatus.API_ERROR,
                text,
                result.message or f"{API_ERROR_MESSAGE} Status: {result.status_code}.",
                status_code=result.status_code,
            )

        payload = result.payload or {}
        converter = self._store.converter
        try:
            fetched = converter.remote_reference(payload)
        except FormatError:
            logger.warning(
                "[resolver] bad canonical %r in response for %s", payload.get("canonical"), locator
            )
            return Resolution.failure(
                ResolutionStatus.API_ERROR,
                text,
                f"Failed to parse canonical reference ({payload.get('canonical')}) "
                f"from ESV API for {locator}",
                status_code=result.status_code,
            )

        try:
            corpus = converter.convert_remote(payload)
        except FormatError as exc:
            logger.error("[resolver] could not convert response for %s: %s", locator, exc)
            return Resolution.failure(
                ResolutionStatus.FORMAT_ERROR, text, str(exc), status_code=result.status_code
            )
        # A whole-chapter request comes back whole, whatever canonical form the
        # remote source reports for it.
        self._store.merge(corpus, source=locator if locator.is_chapter_reference else fetched)

        merged = self._store.lookup(locator, allow_partial=True)
        blobs = [blob for blob in payload.get("passages") or [] if isinstance(blob, str) and blob]
        passage = Passage(
            reference=locator,
            verses=merged.verses if merged is not None else [],
            rich_content="\n".join(blobs) or None,
            version=self._version,
        )
        if passage.is_empty:
            logger.info("[resolver] remote source returned no content for %s", locator)
            return Resolution.failure(
                ResolutionStatus.NOT_FOUND, text, f"No content found for {locator}."
            )
        return Resolution.found(text, passage, SOURCE_REMOTE)


__all__ = [
    "API_ERROR_MESSAGE",
    "ContentResolver",
    "MISSING_CREDENTIAL_MESSAGE",
    "SOURCE_LOCAL",
    "SOURCE_REMOTE",
]
