"""In-memory structured corpus with locator lookups."""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterator, List, Optional, Tuple

from passage_resolver.core.exceptions import FormatError
from passage_resolver.core.logging import get_logger
from passage_resolver.core.models import Locator, Passage, Verse
from passage_resolver.services.chapter_locks import ChapterLockRegistry
from passage_resolver.services.format_converter import SHAPE_REMOTE, Corpus, FormatConverter

logger = get_logger(__name__)


# Inclusive verse span; ``None`` as the upper bound runs to the end of the chapter.
Span = Tuple[int, Optional[int]]


def _ordered(verses: Dict[str, str]) -> List[Tuple[int, str]]:
    """Verses of one chapter sorted by numeric verse number."""
    return sorted(((int(key), text) for key, text in verses.items()), key=lambda item: item[0])


def _covered(spans: List[Span], low: int, high: Optional[int]) -> bool:
    if high is None:
        return any(start <= low and end is None for start, end in spans)
    return all(
        any(start <= verse_no and (end is None or verse_no <= end) for start, end in spans)
        for verse_no in range(low, high + 1)
    )


class ContentStore:
    """Nested ``book -> chapter -> verse -> text`` mapping.

    ``load`` replaces the whole corpus; ``merge`` adds chapters fetched on
    demand. Chapter dictionaries are replaced rather than edited in place so
    lookups can read without taking any lock.

    Chapters merged from a partial remote response are tracked as fragments
    together with the verse spans they are known to hold. A lookup that
    reaches outside those spans is a miss, so the caller fetches again.
    """

    def __init__(
        self,
        converter: Optional[FormatConverter] = None,
        locks: Optional[ChapterLockRegistry] = None,
    ) -> None:
        self._converter = converter or FormatConverter()
        self._locks = locks or ChapterLockRegistry()
        self._load_lock = threading.Lock()
        self._corpus: Corpus = {}
        self._fragments: Dict[Tuple[str, str], List[Span]] = {}

    @property
    def converter(self) -> FormatConverter:
        return self._converter

    def load(self, raw: Any) -> None:
        """Replace the corpus with ``raw``; on :class:`FormatError` nothing changes."""
        try:
            corpus = self._converter.convert(raw)
        except FormatError as exc:
            logger.error("[store] corpus load rejected: %s", exc)
            raise
        with self._load_lock:
            self._corpus = corpus
            self._fragments = {}
        logger.info(
            "[store] loaded corpus with %d book(s), %d verse(s)", len(corpus), self.verse_count()
        )

    def merge(self, corpus: Corpus, source: Optional[Locator] = None) -> int:
        """Add ``corpus`` to the store, keeping every other entry.

        Args:
            corpus: Converted verses to add.
            source: The reference the verses were fetched for. When it names
                less than whole chapters, the touched chapters are recorded as
                fragments; otherwise they count as complete.

        Returns:
            Number of verses written.
        """
        written = 0
        target = self._corpus
        for book, chapters in corpus.items():
            book_entry = target.setdefault(book, {})
            for chapter, verses in chapters.items():
                span = self._fragment_span(source, book, int(chapter))
                key = (book, chapter)
                with self._locks.get_lock(book, chapter):
                    existed = chapter in book_entry
                    updated = dict(book_entry.get(chapter, {}))
                    updated.update(verses)
                    book_entry[chapter] = updated
                    if span is None:
                        self._fragments.pop(key, None)
                    elif key in self._fragments or not existed:
                        # A complete chapter stays complete after a partial merge.
                        self._fragments[key] = [*self._fragments.get(key, []), span]
                written += len(verses)
        logger.debug("[store] merged %d verse(s)", written)
        return written

    def merge_payload(self, raw: Any) -> int:
        """Convert ``raw`` and merge it, tracking partial remote responses."""
        corpus = self._converter.convert(raw)
        source = None
        if self._converter.detect(raw) == SHAPE_REMOTE:
            source = self._converter.remote_reference(raw)
        return self.merge(corpus, source=source)

    @staticmethod
    def _fragment_span(source: Optional[Locator], book: str, chapter_no: int) -> Optional[Span]:
        if source is None or source.is_chapter_reference or source.book != book:
            return None
        low = source.verse if chapter_no == source.chapter else 1
        if chapter_no != source.end_chapter_or_start:
            return low, None
        return low, source.end_verse if source.end_verse is not None else source.verse

    def is_fragment(self, book: str, chapter: int) -> bool:
        """True when the chapter holds only verses from a partial fetch."""
        return (book, str(chapter)) in self._fragments

    def lookup(self, locator: Locator, allow_partial: bool = False) -> Optional[Passage]:
        """Return the verses covered by ``locator``.

        ``None`` means the book or the starting chapter is absent, or that the
        locator reaches past the verses a fragment chapter is known to hold
        (unless ``allow_partial`` is set). Individually missing verses are
        skipped, so the passage may be empty.
        """
        chapters = self._corpus.get(locator.book)
        if chapters is None or str(locator.chapter) not in chapters:
            logger.debug("[store] miss for %s", locator)
            return None

        last_chapter = locator.end_chapter_or_start
        verses: List[Verse] = []
        for chapter_no in range(locator.chapter, last_chapter + 1):
            chapter = chapters.get(str(chapter_no))
            if chapter is None:
                continue
            low, high = self._bounds(locator, chapter_no, last_chapter)
            spans = self._fragments.get((locator.book, str(chapter_no)))
            if spans is not None and not allow_partial and not _covered(spans, low, high):
                logger.debug("[store] %s extends past fragment of chapter %d", locator, chapter_no)
                return None
            for verse_no, text in _ordered(chapter):
                if low <= verse_no and (high is None or verse_no <= high):
                    verses.append(Verse(locator.book, chapter_no, verse_no, text))
        return Passage(reference=locator, verses=verses)

    @staticmethod
    def _bounds(locator: Locator, chapter_no: int, last_chapter: int) -> Tuple[int, Optional[int]]:
        if locator.verse is None:
            return 1, None
        low = locator.verse if chapter_no == locator.chapter else 1
        if chapter_no != last_chapter:
            return low, None
        return low, locator.end_verse if locator.end_verse is not None else locator.verse

    def has_book(self, book: str) -> bool:
        return book in self._corpus

    def has_chapter(self, book: str, chapter: int) -> bool:
        return str(chapter) in self._corpus.get(book, {})

    def books(self) -> List[str]:
        return list(self._corpus)

    def verse_count(self) -> int:
        return sum(len(verses) for chapters in self._corpus.values() for verses in chapters.values())

    def iter_verses(self, book: str) -> Iterator[Verse]:
        """Yield every stored verse of ``book`` in chapter/verse order."""
        chapters = self._corpus.get(book, {})
        for chapter_no in sorted(int(key) for key in chapters):
            for verse_no, text in _ordered(chapters[str(chapter_no)]):
                yield Verse(book, chapter_no, verse_no, text)

    def snapshot(self) -> Corpus:
        """Deep copy of the current corpus."""
        return {
            book: {chapter: dict(verses) for chapter, verses in chapters.items()}
            for book, chapters in self._corpus.items()
        }

    def clear(self) -> None:
        with self._load_lock:
            self._corpus = {}
            self._fragments = {}


__all__ = ["ContentStore"]
