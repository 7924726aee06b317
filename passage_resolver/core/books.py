"""Canonical book names, chapter counts, and alias normalization.

The tables in this module are built once at import time and exposed
read-only through :class:`BookNameRegistry`. Callers should use the shared
``registry`` instance rather than the raw tables.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

# Canonical order: Old Testament then New Testament.
BOOK_ORDER: Tuple[str, ...] = (
    # Pentateuch
    "Genesis", "Exodus", "Leviticus", "Numbers", "Deuteronomy",
    # History
    "Joshua", "Judges", "Ruth", "1 Samuel", "2 Samuel",
    "1 Kings", "2 Kings", "1 Chronicles", "2 Chronicles",
    "Ezra", "Nehemiah", "Esther",
    # Poetry/Wisdom
    "Job", "Psalms", "Proverbs", "Ecclesiastes", "Song of Solomon",
    # Major Prophets
    "Isaiah", "Jeremiah", "Lamentations", "Ezekiel", "Daniel",
    # Minor Prophets
    "Hosea", "Joel", "Amos", "Obadiah", "Jonah", "Micah",
    "Nahum", "Habakkuk", "Zephaniah", "Haggai", "Zechariah", "Malachi",
    # Gospels/Acts
    "Matthew", "Mark", "Luke", "John", "Acts",
    # Paul's Epistles
    "Romans", "1 Corinthians", "2 Corinthians", "Galatians",
    "Ephesians", "Philippians", "Colossians", "1 Thessalonians",
    "2 Thessalonians", "1 Timothy", "2 Timothy", "Titus", "Philemon",
    # General Epistles + Revelation
    "Hebrews", "James", "1 Peter", "2 Peter",
    "1 John", "2 John", "3 John", "Jude", "Revelation",
)

_CHAPTER_COUNTS: Dict[str, int] = {
    "Genesis": 50, "Exodus": 40, "Leviticus": 27, "Numbers": 36, "Deuteronomy": 34,
    "Joshua": 24, "Judges": 21, "Ruth": 4, "1 Samuel": 31, "2 Samuel": 24,
    "1 Kings": 22, "2 Kings": 25, "1 Chronicles": 29, "2 Chronicles": 36,
    "Ezra": 10, "Nehemiah": 13, "Esther": 10, "Job": 42, "Psalms": 150,
    "Proverbs": 31, "Ecclesiastes": 12, "Song of Solomon": 8, "Isaiah": 66,
    "Jeremiah": 52, "Lamentations": 5, "Ezekiel": 48, "Daniel": 12, "Hosea": 14,
    "Joel": 3, "Amos": 9, "Obadiah": 1, "Jonah": 4, "Micah": 7,
    "Nahum": 3, "Habakkuk": 3, "Zephaniah": 3, "Haggai": 2, "Zechariah": 14,
    "Malachi": 4,
    "Matthew": 28, "Mark": 16, "Luke": 24, "John": 21, "Acts": 28,
    "Romans": 16, "1 Corinthians": 16, "2 Corinthians": 13, "Galatians": 6,
    "Ephesians": 6, "Philippians": 4, "Colossians": 4, "1 Thessalonians": 5,
    "2 Thessalonians": 3, "1 Timothy": 6, "2 Timothy": 4, "Titus": 3,
    "Philemon": 1, "Hebrews": 13, "James": 5, "1 Peter": 5, "2 Peter": 3,
    "1 John": 5, "2 John": 1, "3 John": 1, "Jude": 1, "Revelation": 22,
}

# Alternate spellings per canonical book. Keys of the built table are lowercase.
_BOOK_ALIASES: Dict[str, Tuple[str, ...]] = {
    "Genesis": ("Gen", "Ge", "Gn"),
    "Exodus": ("Exo", "Ex", "Exod"),
    "Leviticus": ("Lev", "Le", "Lv"),
    "Numbers": ("Num", "Nu", "Nm", "Nb"),
    "Deuteronomy": ("Deut", "Deu", "De", "Dt"),
    "Joshua": ("Josh", "Jos", "Jsh"),
    "Judges": ("Judg", "Jdg", "Jg"),
    "Ruth": ("Rth", "Rut", "Ru"),
    "1 Samuel": ("1 Sam", "1 Sa", "1S", "I Sa", "I Sam", "I Samuel", "1Sam", "1Sa", "1st Samuel"),
    "2 Samuel": ("2 Sam", "2 Sa", "2S", "II Sa", "II Sam", "II Samuel", "2Sam", "2Sa", "2nd Samuel"),
    "1 Kings": ("1 Ki", "1 K", "1K", "I K", "I Kings", "1Ki", "1Kgs", "1st Kings"),
    "2 Kings": ("2 Ki", "2 K", "2K", "II K", "II Kings", "2Ki", "2Kgs", "2nd Kings"),
    "1 Chronicles": ("1 Ch", "1 Chr", "1 Chron", "I Ch", "1Ch", "1Chr", "1st Chronicles"),
    "2 Chronicles": ("2 Ch", "2 Chr", "2 Chron", "II Ch", "2Ch", "2Chr", "2nd Chronicles"),
    "Ezra": ("Ezr", "Ez"),
    "Nehemiah": ("Neh", "Ne"),
    "Esther": ("Est", "Esth", "Es"),
    "Job": ("Jb",),
    "Psalms": ("Ps", "Psa", "Psalm", "Pslm", "Pss"),
    "Proverbs": ("Prov", "Pro", "Prv", "Pr"),
    "Ecclesiastes": ("Eccl", "Ecc", "Ec", "Qoh", "Qoheleth"),
    "Song of Solomon": ("Song", "SoS", "Canticles", "Song of Songs", "Cant"),
    "Isaiah": ("Isa", "Is"),
    "Jeremiah": ("Jer", "Je"),
    "Lamentations": ("Lam", "La"),
    "Ezekiel": ("Ezek", "Eze", "Ezk"),
    "Daniel": ("Dan", "Da", "Dn"),
    "Hosea": ("Hos", "Ho"),
    "Joel": ("Jl",),
    "Amos": ("Am",),
    "Obadiah": ("Obad", "Ob"),
    "Jonah": ("Jon", "Jnh"),
    "Micah": ("Mic", "Mi"),
    "Nahum": ("Nah", "Na"),
    "Habakkuk": ("Hab", "Hb"),
    "Zephaniah": ("Zeph", "Zep", "Zp"),
    "Haggai": ("Hag", "Hg"),
    "Zechariah": ("Zech", "Zec", "Zc"),
    "Malachi": ("Mal", "Ml"),
    "Matthew": ("Matt", "Mat", "Mt"),
    "Mark": ("Mrk", "Mk", "Mr"),
    "Luke": ("Luk", "Lk", "Lu"),
    "John": ("Jn", "Jhn"),
    "Acts": ("Act", "Ac"),
    "Romans": ("Rom", "Ro", "Rm"),
    "1 Corinthians": ("1 Cor", "1 Co", "I Co", "I Cor", "1Cor", "1Co", "1st Corinthians"),
    "2 Corinthians": ("2 Cor", "2 Co", "II Co", "II Cor", "2Cor", "2Co", "2nd Corinthians"),
    "Galatians": ("Gal", "Ga"),
    "Ephesians": ("Eph", "Ep"),
    "Philippians": ("Phil", "Php", "Pp"),
    "Colossians": ("Col", "Co"),
    "1 Thessalonians": ("1 Thess", "1 Th", "I Th", "I Thess", "1Thess", "1Th", "1st Thessalonians"),
    "2 Thessalonians": ("2 Thess", "2 Th", "II Th", "II Thess", "2Thess", "2Th", "2nd Thessalonians"),
    "1 Timothy": ("1 Tim", "1 Ti", "I Ti", "I Tim", "1Tim", "1Ti", "1st Timothy"),
    "2 Timothy": ("2 Tim", "2 Ti", "II Ti", "II Tim", "2Tim", "2Ti", "2nd Timothy"),
    "Titus": ("Tit", "Ti"),
    "Philemon": ("Phm", "Phlm", "Philem", "Phile", "Pm"),
    "Hebrews": ("Heb", "He"),
    "James": ("Jas", "Jm"),
    "1 Peter": ("1 Pet", "1 Pe", "I Pe", "I Peter", "1Pet", "1Pe", "1st Peter"),
    "2 Peter": ("2 Pet", "2 Pe", "II Pe", "II Peter", "2Pet", "2Pe", "2nd Peter"),
    "1 John": ("1 Jn", "I Jn", "I John", "1Jn", "1Jo", "1st John"),
    "2 John": ("2 Jn", "II Jn", "II John", "2Jn", "2Jo", "2nd John"),
    "3 John": ("3 Jn", "III Jn", "III John", "3Jn", "3Jo", "3rd John"),
    "Jude": ("Jud", "Jd"),
    "Revelation": ("Rev", "Re", "The Revelation"),
}

_NUMBERED_BOOK = re.compile(r"^\d+\s*[A-Za-z]+")
_NUMBERED_BOOK_TWO_WORDS = re.compile(r"^\d+\s*[A-Za-z]+\s+[A-Za-z]+")
_WORD_PREFIXES = (
    re.compile(r"^[A-Za-z]+"),
    re.compile(r"^[A-Za-z]+\s+[A-Za-z]+"),
    re.compile(r"^[A-Za-z]+\s+[A-Za-z]+\s+[A-Za-z]+"),
)


def _build_alias_table() -> Mapping[str, str]:
    table: Dict[str, str] = {}
    for canonical in BOOK_ORDER:
        table[canonical.lower()] = canonical
        for alias in _BOOK_ALIASES.get(canonical, ()):
            table[alias.lower()] = canonical
    return MappingProxyType(table)


BOOK_ALIASES: Mapping[str, str] = _build_alias_table()
CHAPTER_COUNTS: Mapping[str, int] = MappingProxyType(dict(_CHAPTER_COUNTS))


def _clean(name: str) -> str:
    return " ".join(name.split()).lower()


class BookNameRegistry:
    """Read-only view over the canonical book tables."""

    def __init__(
        self,
        aliases: Mapping[str, str] = BOOK_ALIASES,
        chapter_counts: Mapping[str, int] = CHAPTER_COUNTS,
        order: Tuple[str, ...] = BOOK_ORDER,
    ) -> None:
        self._aliases = aliases
        self._chapter_counts = chapter_counts
        self._order = order
        self._positions = {name: idx for idx, name in enumerate(order)}
        # Longest keys first; ties keep table order.
        self._prefix_keys = sorted(aliases.items(), key=lambda item: len(item[0]), reverse=True)

    def normalize(self, raw_name: str) -> Optional[str]:
        """Return the canonical name for ``raw_name`` or ``None``.

        Exact case-insensitive matches win; otherwise the longest table key
        that prefixes the input is accepted, so "Ezekial" reads as Ezekiel
        rather than Ezra.
        """
        if raw_name is None:
            raise TypeError("raw_name must be a string")
        cleaned = _clean(raw_name)
        if not cleaned:
            return None
        exact = self._aliases.get(cleaned)
        if exact is not None:
            return exact
        for key, canonical in self._prefix_keys:
            if cleaned.startswith(key):
                return canonical
        return None

    def is_canonical(self, name: str) -> bool:
        """True when ``name`` is spelled exactly as a canonical book."""
        return name in self._positions

    def chapter_count(self, book: str) -> int:
        """Return the chapter count for ``book``; 1 for anything unknown."""
        canonical = self.normalize(book) if book else None
        if canonical is None:
            return 1
        return self._chapter_counts.get(canonical, 1)

    def book_order(self) -> List[str]:
        """Return a fresh list of the canonical names in order."""
        return list(self._order)

    def book_for_id(self, book_id: int) -> Optional[str]:
        """Map a 1-based canonical position (1 = Genesis) to its name."""
        if 1 <= book_id <= len(self._order):
            return self._order[book_id - 1]
        return None

    def book_id(self, book: str) -> Optional[int]:
        """Return the 1-based canonical position of ``book``."""
        position = self._positions.get(book)
        return None if position is None else position + 1

    def aliases(self) -> Mapping[str, str]:
        """Return the lowercase alias → canonical table (read-only)."""
        return self._aliases

    def extract_book_prefix(self, reference: str) -> str:
        """Return the leading book-name substring of ``reference``.

        Numbered books ("1 John", "2nd Kings") are tried first. Otherwise
        the one-, two-, and three-word prefixes are tried and the longest
        one that normalizes wins, so "Song of Solomon" is not shadowed by
        "Song". Returns an empty string when nothing matches.
        """
        if reference is None:
            raise TypeError("reference must be a string")
        text = reference.strip()
        if not text:
            return ""

        numbered = _NUMBERED_BOOK.match(text)
        if numbered:
            longer = _NUMBERED_BOOK_TWO_WORDS.match(text)
            if longer and self.normalize(longer.group(0)) and not self.normalize(numbered.group(0)):
                return longer.group(0)
            if longer and _clean(longer.group(0)) in self._aliases:
                return longer.group(0)
            # Returned even when unknown so callers can report the bad book.
            return numbered.group(0)

        longest = ""
        for pattern in _WORD_PREFIXES:
            match = pattern.match(text)
            if match and self.normalize(match.group(0)):
                longest = match.group(0)
        return longest

    def next_chapter(self, book: str, chapter: int) -> Optional[Tuple[str, int]]:
        """Return the chapter after ``book chapter`` in canonical order."""
        canonical = self.normalize(book)
        if canonical is None:
            return None
        if chapter < self.chapter_count(canonical):
            return canonical, chapter + 1
        position = self._positions[canonical]
        if position + 1 >= len(self._order):
            return None
        return self._order[position + 1], 1

    def previous_chapter(self, book: str, chapter: int) -> Optional[Tuple[str, int]]:
        """Return the chapter before ``book chapter`` in canonical order."""
        canonical = self.normalize(book)
        if canonical is None:
            return None
        if chapter > 1:
            return canonical, chapter - 1
        position = self._positions[canonical]
        if position == 0:
            return None
        previous_book = self._order[position - 1]
        return previous_book, self.chapter_count(previous_book)

    def suggest(self, query: str, limit: Optional[int] = None) -> List[str]:
        """Canonical names containing ``query`` (case-insensitive), in order."""
        needle = query.strip().lower()
        matches = [book for book in self._order if needle in book.lower()]
        return matches if limit is None else matches[:limit]


registry = BookNameRegistry()


__all__ = [
    "BOOK_ORDER",
    "BOOK_ALIASES",
    "CHAPTER_COUNTS",
    "BookNameRegistry",
    "registry",
]
