"""Citation grammar: turn free-form reference strings into Locators.

Five shapes are recognized after the book name, tried in priority order:

    CH:V-CH:V   cross-chapter verse range   "Philippians 1:27-2:11"
    CH-CH       whole-chapter range         "Ephesians 1-2"
    CH:V-V      same-chapter verse range    "Genesis 1:1-10"
    CH:V        single verse                "John 3:16"
    CH          whole chapter               "Obadiah 1"

En and em dashes are accepted as range separators, and whitespace around the
hyphen is ignored. The parser never raises for malformed text; callers get
``None`` (or a failed :class:`ParseOutcome` with a reason).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Tuple

from passage_resolver.core.books import BookNameRegistry, registry
from passage_resolver.core.exceptions import LocatorError
from passage_resolver.core.logging import get_logger
from passage_resolver.core.models import Locator, ResolutionStatus

logger = get_logger(__name__)

_DASHES = re.compile(r"\s*[-–—]\s*")
_LEADS_WITH_LETTER = re.compile(r"^\d*\s*[A-Za-z]")


def _cross_chapter(book: str, m: re.Match[str]) -> Locator:
    return Locator(
        book,
        int(m.group(1)),
        verse=int(m.group(2)),
        end_chapter=int(m.group(3)),
        end_verse=int(m.group(4)),
    )


def _chapter_range(book: str, m: re.Match[str]) -> Locator:
    return Locator(book, int(m.group(1)), end_chapter=int(m.group(2)))


def _verse_range(book: str, m: re.Match[str]) -> Locator:
    return Locator(book, int(m.group(1)), verse=int(m.group(2)), end_verse=int(m.group(3)))


def _single_verse(book: str, m: re.Match[str]) -> Locator:
    return Locator(book, int(m.group(1)), verse=int(m.group(2)))


def _whole_chapter(book: str, m: re.Match[str]) -> Locator:
    return Locator(book, int(m.group(1)))


# Order matters: first match wins.
GRAMMAR: Tuple[Tuple[str, Pattern[str], Callable[[str, re.Match[str]], Locator]], ...] = (
    ("cross-chapter", re.compile(r"^(\d+):(\d+)-(\d+):(\d+)$"), _cross_chapter),
    ("chapter-range", re.compile(r"^(\d+)-(\d+)$"), _chapter_range),
    ("verse-range", re.compile(r"^(\d+):(\d+)-(\d+)$"), _verse_range),
    ("single-verse", re.compile(r"^(\d+):(\d+)$"), _single_verse),
    ("chapter", re.compile(r"^(\d+)$"), _whole_chapter),
)


@dataclass(frozen=True, slots=True)
class ParseOutcome:
    """Locator on success, otherwise a failure status with a short reason."""

    locator: Optional[Locator] = None
    status: Optional[ResolutionStatus] = None
    reason: str = ""
    book_text: str = ""

    @property
    def ok(self) -> bool:
        return self.locator is not None


def _invalid(reason: str, book_text: str = "") -> ParseOutcome:
    return ParseOutcome(status=ResolutionStatus.INVALID_REFERENCE, reason=reason, book_text=book_text)


def _loose(part: str) -> str:
    if not part:
        return ""
    return "(?i:" + r"\s+".join(re.escape(word) for word in part.split(" ")) + ")"


def _scanner_alternative(name: str) -> str:
    """Pattern for a lowercase book key whose first letter must be capitalized.

    Keeps prose like "he 3 times" or "I am 5" from reading as citations.
    """
    starts = [
        i for i, char in enumerate(name) if char.isalpha() and (i == 0 or name[i - 1] == " ")
    ]
    if not starts:
        # "1jo", "2sa": no standalone word to capitalize
        return _loose(name)
    idx = starts[0]
    head, first, tail = name[:idx], name[idx], name[idx + 1 :]
    return f"{_loose(head)}{first.upper()}{_loose(tail)}"


class ReferenceParser:
    """Stateless parser over a :class:`BookNameRegistry`."""

    def __init__(self, books: BookNameRegistry = registry) -> None:
        self._books = books
        self._scanner: Optional[Pattern[str]] = None

    def parse(self, text: str) -> Optional[Locator]:
        """Return the Locator for ``text`` or ``None`` when it is not a citation."""
        return self.parse_detailed(text).locator

    def parse_detailed(self, text: str) -> ParseOutcome:
        """Parse ``text`` and explain failures.

        An extracted book prefix that does not normalize is reported as
        ``unknown-book``; every other failure is ``invalid-reference``.
        """
        if text is None:
            raise TypeError("text must be a string")
        cleaned = " ".join(text.split())
        if not cleaned:
            return _invalid("empty reference")

        book_text = self._books.extract_book_prefix(cleaned)
        if not book_text:
            if _LEADS_WITH_LETTER.match(cleaned):
                return ParseOutcome(
                    status=ResolutionStatus.UNKNOWN_BOOK,
                    reason=f"unrecognized book in {cleaned!r}",
                )
            return _invalid("no book name found")

        book = self._books.normalize(book_text)
        if book is None:
            return ParseOutcome(
                status=ResolutionStatus.UNKNOWN_BOOK,
                reason=f"unrecognized book {book_text!r}",
                book_text=book_text,
            )

        remainder = cleaned[len(book_text) :].strip().lstrip(".").strip()
        remainder = _DASHES.sub("-", remainder)
        remainder = re.sub(r"\s*:\s*", ":", remainder)
        if not remainder:
            return _invalid("missing chapter", book_text)

        for shape, pattern, build in GRAMMAR:
            match = pattern.match(remainder)
            if match is None:
                continue
            try:
                locator = build(book, match)
            except (LocatorError, ValueError) as exc:
                logger.debug("[parser] %s shape rejected for %r: %s", shape, cleaned, exc)
                return _invalid(str(exc), book_text)
            return ParseOutcome(locator=locator, book_text=book_text)

        return _invalid(f"unrecognized chapter/verse {remainder!r}", book_text)

    def is_valid_reference(self, text: str) -> bool:
        """True when ``text`` parses to a Locator."""
        return self.parse(text) is not None

    def find_references(self, text: str) -> List[Locator]:
        """Return every citation found in free ``text``, in order of appearance."""
        if text is None:
            raise TypeError("text must be a string")
        found: List[Locator] = []
        for match in self._citation_scanner().finditer(text):
            candidate = f"{match.group('book')} {match.group('numbers')}"
            locator = self.parse(candidate)
            if locator is not None:
                found.append(locator)
        return found

    def _citation_scanner(self) -> Pattern[str]:
        if self._scanner is None:
            names = sorted(self._books.aliases().keys(), key=len, reverse=True)
            alternatives = "|".join(_scanner_alternative(name) for name in names)
            self._scanner = re.compile(
                rf"(?<![\w])(?P<book>{alternatives})\.?\s*"
                r"(?P<numbers>\d+(?::\d+)?(?:\s*[-–—]\s*\d+(?::\d+)?)?)(?![\w:])"
            )
        return self._scanner


default_parser = ReferenceParser()


def find_references(text: str) -> List[Locator]:
    """Module-level convenience over :data:`default_parser`."""
    return default_parser.find_references(text)


def is_valid_reference(text: str) -> bool:
    return default_parser.is_valid_reference(text)


__all__ = [
    "GRAMMAR",
    "ParseOutcome",
    "ReferenceParser",
    "default_parser",
    "find_references",
    "is_valid_reference",
]
