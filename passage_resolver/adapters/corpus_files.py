"""Read raw corpus payloads from JSON files on disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from passage_resolver.core.exceptions import FormatError
from passage_resolver.core.logging import get_logger

logger = get_logger(__name__)


def load_corpus_file(path: Path | str) -> Any:
    """Return the decoded JSON payload stored at ``path``.

    The payload is returned as-is; shape detection happens in the store.
    Missing or unreadable files raise ``OSError``; invalid JSON raises
    :class:`FormatError`.
    """
    corpus_path = Path(path)
    text = corpus_path.read_text(encoding="utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("[store] corpus file %s is not valid JSON: %s", corpus_path, exc)
        raise FormatError(f"{corpus_path} is not valid JSON: {exc.msg}") from exc
    logger.info("[store] read corpus file %s (%d bytes)", corpus_path, len(text))
    return payload


__all__ = ["load_corpus_file"]
