"""Protocol definitions for infrastructure adapters."""

# pylint: disable=unnecessary-ellipsis

from __future__ import annotations

from typing import Protocol

from passage_resolver.core.models import FetchResult


class PassageFetcherPort(Protocol):
    """Port exposing a remote passage source (ESV-shaped responses)."""

    async def fetch_passage(self, reference: str, credential: str) -> FetchResult:
        """Fetch ``reference`` using ``credential``.

        Implementations report HTTP failures through ``FetchResult.failure``
        and may raise ``RemoteFetchError`` for transport problems.
        """
        ...


__all__ = ["PassageFetcherPort"]
