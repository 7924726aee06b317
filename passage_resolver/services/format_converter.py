"""Normalize raw corpus payloads into the nested ``book -> chapter -> verse`` shape.

Three payload shapes are recognized:

* structured: ``{"John": {"3": {"16": "For God so loved..."}}}``
* flat records: ``[{"book": 43, "chapter": 3, "verse": 16, "text": "..."}]``
  where ``book`` is a 1-66 canonical id or any recognized book name
* remote passage responses: ``{"canonical": "John 3:16", "passages": ["..."]}``

Anything else raises :class:`FormatError`.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from bs4 import BeautifulSoup

from passage_resolver.core.books import BookNameRegistry, registry
from passage_resolver.core.exceptions import FormatError
from passage_resolver.core.logging import get_logger
from passage_resolver.core.models import Locator
from passage_resolver.services.reference_parser import ReferenceParser, default_parser

logger = get_logger(__name__)

Corpus = Dict[str, Dict[str, Dict[str, str]]]

SHAPE_STRUCTURED = "structured"
SHAPE_FLAT = "flat"
SHAPE_REMOTE = "remote"

_VERSE_LINE = re.compile(r"^\s*(\d+):(\d+)\s*(.*)$")
_MARKER_LINE = re.compile(r"^\s*\[(\d+)\]\s*(.*)$")
_INLINE_MARKER = re.compile(r"\s*(\[\d+\])")
_MARKUP_HINT = re.compile(r"<[A-Za-z][^>]*>")


def _as_number(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise FormatError(f"{label} must be numeric, got {value!r}")
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise FormatError(f"{label} must be numeric, got {value!r}") from exc
    if number < 1:
        raise FormatError(f"{label} must be positive, got {number}")
    return number


def flatten_markup(fragment: str) -> str:
    """Flatten an HTML passage into text lines, one verse marker per line.

    ``chapter-num`` labels become ``CH:V`` lines and ``verse-num`` labels
    become ``[V]`` lines. Headings and footnotes are dropped.
    """
    soup = BeautifulSoup(fragment, "html.parser")
    for node in soup.select("h1, h2, h3, h4, sup.footnote, div.footnotes, .extra_text, .audio"):
        if not node.decomposed:
            node.decompose()
    for node in soup.select("b.chapter-num, b.verse-num"):
        label = node.get_text(strip=True).replace("\xa0", "")
        classes = node.get("class") or []
        if "chapter-num" in classes:
            marker = label if ":" in label else f"{label}:1"
        else:
            marker = f"[{label}]"
        node.replace_with(f"\n{marker} ")
    for node in soup.find_all("br"):
        node.replace_with("\n")
    for node in soup.find_all(["p", "div"]):
        node.insert_before("\n")
    return soup.get_text()


class FormatConverter:
    """Detects payload shapes and converts them to a :data:`Corpus`."""

    def __init__(
        self,
        books: BookNameRegistry = registry,
        parser: Optional[ReferenceParser] = None,
    ) -> None:
        self._books = books
        self._parser = parser or default_parser

    def detect(self, raw: Any) -> str:
        """Return the shape name of ``raw`` or raise :class:`FormatError`."""
        if isinstance(raw, Mapping) and "canonical" in raw and isinstance(raw.get("passages"), list):
            return SHAPE_REMOTE
        if isinstance(raw, (list, tuple)):
            return SHAPE_FLAT
        if isinstance(raw, Mapping) and all(
            isinstance(chapters, Mapping)
            and all(isinstance(verses, Mapping) for verses in chapters.values())
            for chapters in raw.values()
        ):
            return SHAPE_STRUCTURED
        raise FormatError(f"unrecognized corpus payload of type {type(raw).__name__}")

    def convert(self, raw: Any) -> Corpus:
        """Convert any supported payload; the input is never mutated."""
        shape = self.detect(raw)
        if shape == SHAPE_REMOTE:
            corpus = self.convert_remote(raw)
        elif shape == SHAPE_FLAT:
            corpus = self._from_flat(raw)
        else:
            corpus = self._from_structured(raw)
        logger.debug("[converter] converted %s payload covering %d book(s)", shape, len(corpus))
        return corpus

    def _book(self, value: Any) -> str:
        if isinstance(value, int) and not isinstance(value, bool):
            book = self._books.book_for_id(value)
        elif isinstance(value, str) and value.strip().isdigit():
            book = self._books.book_for_id(int(value.strip()))
        elif isinstance(value, str):
            book = self._books.normalize(value)
        else:
            book = None
        if book is None:
            raise FormatError(f"unknown book {value!r}")
        return book

    def _from_structured(self, raw: Mapping[str, Any]) -> Corpus:
        corpus: Corpus = {}
        for book_key, chapters in raw.items():
            book = self._book(book_key)
            for chapter_key, verses in chapters.items():
                chapter = str(_as_number(chapter_key, f"{book} chapter"))
                target = corpus.setdefault(book, {}).setdefault(chapter, {})
                for verse_key, text in verses.items():
                    if not isinstance(text, str):
                        raise FormatError(f"{book} {chapter}:{verse_key} text must be a string")
                    target[str(_as_number(verse_key, f"{book} {chapter} verse"))] = text
        return corpus

    def _from_flat(self, records: Iterable[Any]) -> Corpus:
        corpus: Corpus = {}
        for index, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise FormatError(f"record {index} is not an object")
            missing = [key for key in ("book", "chapter", "verse", "text") if key not in record]
            if missing:
                raise FormatError(f"record {index} is missing {', '.join(missing)}")
            text = record["text"]
            if not isinstance(text, str):
                raise FormatError(f"record {index} text must be a string")
            book = self._book(record["book"])
            chapter = str(_as_number(record["chapter"], f"record {index} chapter"))
            verse = str(_as_number(record["verse"], f"record {index} verse"))
            corpus.setdefault(book, {}).setdefault(chapter, {})[verse] = text
        return corpus

    def remote_reference(self, payload: Mapping[str, Any]) -> Locator:
        """Parse the ``canonical`` field of a remote response."""
        canonical = payload.get("canonical")
        locator = self._parser.parse(canonical) if isinstance(canonical, str) else None
        if locator is None:
            raise FormatError(f"could not parse canonical reference {canonical!r}")
        return locator

    def convert_remote(self, payload: Mapping[str, Any]) -> Corpus:
        """Split the passage blobs of a remote response into verses."""
        reference = self.remote_reference(payload)
        passages = payload.get("passages") or []
        if not isinstance(passages, list):
            raise FormatError("remote passages must be a list")
        chapters: Dict[str, Dict[str, str]] = {}
        for blob in passages:
            if not isinstance(blob, str):
                raise FormatError("remote passages must be strings")
            for chapter, verse, text in self._split_passage(blob, reference.chapter):
                chapters.setdefault(str(chapter), {})[str(verse)] = text
        if not chapters:
            logger.info("[converter] no verse markers found in passage for %s", reference)
            return {}
        return {reference.book: chapters}

    def _split_passage(self, blob: str, start_chapter: int) -> List[Tuple[int, int, str]]:
        markup = bool(_MARKUP_HINT.search(blob))
        text = flatten_markup(blob) if markup else blob
        text = _INLINE_MARKER.sub(r"\n\1", text)

        verses: List[List[Any]] = []
        chapter = start_chapter
        for line in text.splitlines():
            verse_match = _VERSE_LINE.match(line)
            marker_match = None if verse_match else _MARKER_LINE.match(line)
            if verse_match:
                chapter = int(verse_match.group(1))
                verses.append([chapter, int(verse_match.group(2)), verse_match.group(3)])
            elif marker_match:
                verses.append([chapter, int(marker_match.group(1)), marker_match.group(2)])
            elif verses and line.strip():
                # Poetry and paragraph breaks split one verse across lines;
                # text before the first marker is dropped.
                verses[-1][2] = f"{verses[-1][2]} {line}"
        result = []
        for chapter_no, verse_no, verse_text in verses:
            cleaned = " ".join(verse_text.split())
            if cleaned and chapter_no > 0 and verse_no > 0:
                result.append((chapter_no, verse_no, cleaned))
        return result


__all__ = [
    "Corpus",
    "FormatConverter",
    "SHAPE_FLAT",
    "SHAPE_REMOTE",
    "SHAPE_STRUCTURED",
    "flatten_markup",
]
