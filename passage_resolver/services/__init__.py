"""Application service layer: parsing, storage, and resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from passage_resolver.core.config import Settings
from passage_resolver.core.config import settings as default_settings
from passage_resolver.core.ports import PassageFetcherPort

from .content_resolver import ContentResolver
from .content_store import ContentStore
from .format_converter import FormatConverter
from .reference_parser import ReferenceParser, default_parser


@dataclass(slots=True)
class ServiceContainer:
    """Aggregate of the services a host application needs."""

    parser: ReferenceParser
    store: ContentStore
    resolver: ContentResolver
    fetcher: Optional[PassageFetcherPort] = None


def build_default_services(
    *,
    fetcher_port: Optional[PassageFetcherPort] = None,
    corpus: Any = None,
    app_settings: Optional[Settings] = None,
) -> ServiceContainer:
    """Return a service container, loading ``corpus`` into the store when given."""

    store = ContentStore(FormatConverter())
    if corpus is not None:
        store.load(corpus)
    resolver = ContentResolver.from_settings(
        store, fetcher=fetcher_port, app_settings=app_settings or default_settings
    )
    return ServiceContainer(
        parser=default_parser,
        store=store,
        resolver=resolver,
        fetcher=fetcher_port,
    )


__all__ = ["ServiceContainer", "build_default_services"]
