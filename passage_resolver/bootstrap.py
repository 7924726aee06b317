"""Application bootstrap helpers for assembling the service container."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from passage_resolver.adapters.corpus_files import load_corpus_file
from passage_resolver.adapters.esv import EsvFetcher
from passage_resolver.core.config import Settings
from passage_resolver.core.config import settings as default_settings
from passage_resolver.services import ServiceContainer, build_default_services


def build_default_service_container(
    *,
    corpus_path: Optional[Path] = None,
    fetch: Optional[bool] = None,
    app_settings: Optional[Settings] = None,
) -> ServiceContainer:
    """Return the default service container wired to production adapters.

    ``corpus_path`` overrides ``BIBLE_CORPUS_PATH``; ``fetch`` overrides
    ``DOWNLOAD_ON_DEMAND``.
    """

    cfg = app_settings or default_settings
    if fetch is not None:
        cfg = cfg.model_copy(update={"DOWNLOAD_ON_DEMAND": fetch})
    path = corpus_path or cfg.BIBLE_CORPUS_PATH
    corpus = load_corpus_file(path) if path else None
    return build_default_services(
        fetcher_port=EsvFetcher(app_settings=cfg),
        corpus=corpus,
        app_settings=cfg,
    )


__all__ = ["build_default_service_container"]
