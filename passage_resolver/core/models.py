"""Core value types shared across layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional

from passage_resolver.core.books import registry
from passage_resolver.core.exceptions import LocatorError


@dataclass(frozen=True, slots=True)
class Locator:
    """Immutable reference to a passage within one canonical book.

    Shapes: whole chapter (``verse`` unset), chapter range (``end_chapter``
    only), single verse, same-chapter verse range (``end_verse`` only), and
    cross-chapter range (``end_chapter`` and ``end_verse``).
    """

    book: str
    chapter: int
    verse: Optional[int] = None
    end_chapter: Optional[int] = None
    end_verse: Optional[int] = None

    def __post_init__(self) -> None:
        if not registry.is_canonical(self.book):
            raise LocatorError(f"unknown canonical book: {self.book!r}")
        for label in ("chapter", "verse", "end_chapter", "end_verse"):
            value = getattr(self, label)
            if value is None and label != "chapter":
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise LocatorError(f"{label} must be a positive integer, got {value!r}")
        if self.verse is None:
            if self.end_verse is not None:
                raise LocatorError("end_verse requires a starting verse")
        elif self.end_chapter is not None and self.end_verse is None:
            raise LocatorError("a cross-chapter range needs an end verse")
        if self.end_chapter is not None and self.end_chapter < self.chapter:
            raise LocatorError("end_chapter precedes chapter")
        if (
            self.end_verse is not None
            and self.verse is not None
            and (self.end_chapter is None or self.end_chapter == self.chapter)
            and self.end_verse < self.verse
        ):
            raise LocatorError("end_verse precedes verse")

    def __str__(self) -> str:
        reference = f"{self.book} {self.chapter}"
        if self.verse is not None:
            reference += f":{self.verse}"
            if self.end_verse is not None and self.end_chapter is None:
                reference += f"-{self.end_verse}"
        if self.end_chapter is not None:
            reference += f"-{self.end_chapter}"
            if self.end_verse is not None:
                reference += f":{self.end_verse}"
        return reference

    @property
    def canonical(self) -> str:
        """Deterministic string form; parsing it yields an equal Locator."""
        return str(self)

    @property
    def is_range(self) -> bool:
        return self.end_verse is not None or self.end_chapter is not None

    @property
    def is_chapter_reference(self) -> bool:
        """True when no verse is given (one whole chapter or several)."""
        return self.verse is None

    @property
    def is_chapter_range(self) -> bool:
        return self.verse is None and self.end_chapter is not None

    @property
    def is_cross_chapter(self) -> bool:
        return self.verse is not None and self.end_chapter is not None

    @property
    def end_chapter_or_start(self) -> int:
        return self.end_chapter if self.end_chapter is not None else self.chapter

    def chapter_reference(self) -> "Locator":
        """Return the whole-chapter locator containing this reference."""
        return Locator(self.book, self.chapter)

    def to_dict(self) -> dict[str, Any]:
        return {
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
            "end_chapter": self.end_chapter,
            "end_verse": self.end_verse,
            "reference": str(self),
        }


@dataclass(frozen=True, slots=True)
class Verse:
    """A single resolved verse."""

    book: str
    chapter: int
    verse: int
    text: str


@dataclass(slots=True)
class Passage:
    """Resolved content for a locator.

    ``rich_content`` carries pre-rendered markup from the source and takes
    precedence over ``verses`` when both are present.
    """

    reference: Locator
    verses: List[Verse] = field(default_factory=list)
    rich_content: Optional[str] = None
    missing_credential: bool = False
    version: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.verses and not self.rich_content

    @property
    def text(self) -> str:
        """Verse texts joined by single spaces."""
        return " ".join(v.text for v in self.verses)


class ResolutionStatus(str, Enum):
    """Terminal states of a resolution request."""

    FOUND = "found"
    INVALID_REFERENCE = "invalid-reference"
    UNKNOWN_BOOK = "unknown-book"
    NOT_FOUND = "not-found"
    MISSING_CREDENTIAL = "missing-credential"
    API_ERROR = "api-error"
    FORMAT_ERROR = "format-error"


@dataclass(slots=True)
class Resolution:
    """Tagged result of resolving a citation string."""

    status: ResolutionStatus
    query: str
    passage: Optional[Passage] = None
    message: Optional[str] = None
    status_code: Optional[int] = None
    source: Optional[str] = None

    @classmethod
    def found(cls, query: str, passage: Passage, source: str) -> "Resolution":
        return cls(ResolutionStatus.FOUND, query, passage=passage, source=source)

    @classmethod
    def failure(
        cls,
        status: ResolutionStatus,
        query: str,
        message: str,
        *,
        status_code: Optional[int] = None,
        passage: Optional[Passage] = None,
    ) -> "Resolution":
        return cls(status, query, passage=passage, message=message, status_code=status_code)

    @property
    def ok(self) -> bool:
        return self.status is ResolutionStatus.FOUND

    @property
    def is_invalid_reference(self) -> bool:
        """Unknown books count as invalid references."""
        return self.status in (ResolutionStatus.INVALID_REFERENCE, ResolutionStatus.UNKNOWN_BOOK)

    @property
    def renderable(self) -> bool:
        """True when the display layer should show ``passage`` in place of content."""
        return self.status in (ResolutionStatus.FOUND, ResolutionStatus.MISSING_CREDENTIAL)


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome reported by a remote fetch collaborator."""

    ok: bool
    payload: Optional[Mapping[str, Any]] = None
    status_code: int = 200
    message: str = ""
    auth_failed: bool = False

    @classmethod
    def success(cls, payload: Mapping[str, Any], status_code: int = 200) -> "FetchResult":
        return cls(ok=True, payload=payload, status_code=status_code)

    @classmethod
    def failure(cls, status_code: int, message: str, *, auth_failed: bool = False) -> "FetchResult":
        return cls(ok=False, status_code=status_code, message=message, auth_failed=auth_failed)


__all__ = [
    "Locator",
    "Verse",
    "Passage",
    "ResolutionStatus",
    "Resolution",
    "FetchResult",
]
