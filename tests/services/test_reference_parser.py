"""Tests for the citation grammar and prose scanning."""

from __future__ import annotations

import pytest

from passage_resolver.core.models import Locator, ResolutionStatus
from passage_resolver.services.reference_parser import (
    GRAMMAR,
    ReferenceParser,
    default_parser,
    find_references,
    is_valid_reference,
)

# pylint: disable=missing-function-docstring

parser = ReferenceParser()


def test_grammar_priority_order() -> None:
    assert [name for name, _, _ in GRAMMAR] == [
        "cross-chapter",
        "chapter-range",
        "verse-range",
        "single-verse",
        "chapter",
    ]


@pytest.mark.parametrize(
    "text,expected",
    [
        ("John 3:16", Locator("John", 3, verse=16)),
        ("Genesis 1:1-10", Locator("Genesis", 1, verse=1, end_verse=10)),
        ("Ephesians 1-2", Locator("Ephesians", 1, end_chapter=2)),
        (
            "Philippians 1:27-2:11",
            Locator("Philippians", 1, verse=27, end_chapter=2, end_verse=11),
        ),
        ("Obadiah 1", Locator("Obadiah", 1)),
    ],
)
def test_parses_all_five_shapes(text: str, expected: Locator) -> None:
    locator = parser.parse(text)
    assert locator == expected
    assert str(locator) == text


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Jn 3:16-18", Locator("John", 3, verse=16, end_verse=18)),
        ("jn. 3:16", Locator("John", 3, verse=16)),
        ("1 Sa 3:1", Locator("1 Samuel", 3, verse=1)),
        ("1John 4:8", Locator("1 John", 4, verse=8)),
        ("I Cor 13:4–7", Locator("1 Corinthians", 13, verse=4, end_verse=7)),
        ("Rom 8:28 — 8:30", Locator("Romans", 8, verse=28, end_chapter=8, end_verse=30)),
        ("  Song of Solomon   2:1 ", Locator("Song of Solomon", 2, verse=1)),
        ("Ps 23", Locator("Psalms", 23)),
        ("John 3 : 16", Locator("John", 3, verse=16)),
        ("Gen 1 - 3", Locator("Genesis", 1, end_chapter=3)),
    ],
)
def test_parses_aliases_dashes_and_spacing(text: str, expected: Locator) -> None:
    assert parser.parse(text) == expected


@pytest.mark.parametrize(
    "locator",
    [
        Locator("John", 3, verse=16),
        Locator("Genesis", 1, verse=1, end_verse=10),
        Locator("Ephesians", 1, end_chapter=2),
        Locator("Philippians", 1, verse=27, end_chapter=2, end_verse=11),
        Locator("Song of Solomon", 8),
        Locator("1 Samuel", 3, verse=1, end_chapter=3, end_verse=4),
        Locator("3 John", 1, verse=14),
    ],
)
def test_round_trip(locator: Locator) -> None:
    assert parser.parse(str(locator)) == locator


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "3:16",
        "John",
        "John three",
        "John 3:",
        "John 3:16-",
        "John 3:16-18:",
        "John 0:1",
        "John 3:18-16",
        "John 4-3",
        "John 3:16,18",
        "John 3:16 and more",
    ],
)
def test_rejects_malformed_references(text: str) -> None:
    assert parser.parse(text) is None
    outcome = parser.parse_detailed(text)
    assert not outcome.ok
    assert outcome.status is ResolutionStatus.INVALID_REFERENCE
    assert outcome.reason


@pytest.mark.parametrize("text", ["Nonexistent 1:1", "4 Kings 2:1", "Xyz 3"])
def test_unknown_books_are_distinguished(text: str) -> None:
    outcome = parser.parse_detailed(text)
    assert outcome.locator is None
    assert outcome.status is ResolutionStatus.UNKNOWN_BOOK


def test_parse_rejects_none() -> None:
    with pytest.raises(TypeError):
        parser.parse(None)  # type: ignore[arg-type]


def test_is_valid_reference() -> None:
    assert is_valid_reference("Jude 1")
    assert not is_valid_reference("Jude")
    assert default_parser.is_valid_reference("Rev 22:21")


def test_find_references_in_prose_preserves_order() -> None:
    text = (
        "We read Romans 8:28 on Sunday, then 1 Cor. 13:4-7 and Song of Solomon 2:1. "
        "Compare Jn 3:16–18."
    )
    assert find_references(text) == [
        Locator("Romans", 8, verse=28),
        Locator("1 Corinthians", 13, verse=4, end_verse=7),
        Locator("Song of Solomon", 2, verse=1),
        Locator("John", 3, verse=16, end_verse=18),
    ]


def test_find_references_ignores_lowercase_words_and_bad_numbers() -> None:
    text = "I am 5 years old and he 3 times said John 0:1 was wrong."
    assert find_references(text) == []


def test_philemon_abbreviations_parse_and_are_found_in_prose() -> None:
    assert default_parser.parse("Phlm 4") == Locator("Philemon", 4)
    assert default_parser.parse("Phile 1:4") == Locator("Philemon", 1, verse=4)
    assert default_parser.parse("Ezekial 3") == Locator("Ezekiel", 3)
    assert find_references("Paul appeals in Phlm 1:10 for Onesimus.") == [
        Locator("Philemon", 1, verse=10)
    ]
