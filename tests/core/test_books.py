"""Tests for the canonical book tables and name normalization."""

from __future__ import annotations

import pytest

from passage_resolver.core.books import BOOK_ALIASES, BOOK_ORDER, CHAPTER_COUNTS, registry

# pylint: disable=missing-function-docstring


def test_book_order_has_66_books_old_then_new_testament() -> None:
    order = registry.book_order()
    assert len(order) == 66
    assert order[0] == "Genesis"
    assert order[38] == "Malachi"
    assert order[39] == "Matthew"
    assert order[-1] == "Revelation"
    assert set(CHAPTER_COUNTS) == set(BOOK_ORDER)


def test_book_order_returns_a_copy() -> None:
    order = registry.book_order()
    order.clear()
    assert len(registry.book_order()) == 66


def test_alias_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        BOOK_ALIASES["jn"] = "Jude"  # type: ignore[index]


@pytest.mark.parametrize("alias,canonical", sorted(BOOK_ALIASES.items()))
def test_every_alias_normalizes_like_its_canonical_name(alias: str, canonical: str) -> None:
    assert registry.normalize(alias) == registry.normalize(canonical) == canonical


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1 Sa", "1 Samuel"),
        ("I Samuel", "1 Samuel"),
        ("jn", "John"),
        ("JOHN", "John"),
        ("  song   of solomon ", "Song of Solomon"),
        ("Psalm", "Psalms"),
        ("Revelations", "Revelation"),
        ("Genesisx", "Genesis"),
    ],
)
def test_normalize_exact_and_prefix_matches(raw: str, expected: str) -> None:
    assert registry.normalize(raw) == expected


@pytest.mark.parametrize("raw", ["Nonexistent", "", "   ", "Xyz"])
def test_normalize_returns_none_for_unknown_names(raw: str) -> None:
    assert registry.normalize(raw) is None


def test_normalize_rejects_none() -> None:
    with pytest.raises(TypeError):
        registry.normalize(None)  # type: ignore[arg-type]


def test_chapter_count_known_and_unknown_books() -> None:
    assert registry.chapter_count("Genesis") == 50
    assert registry.chapter_count("Psalms") == 150
    assert registry.chapter_count("Obadiah") == 1
    assert registry.chapter_count("Gen") == 50
    assert registry.chapter_count("Nonexistent") == 1


def test_book_ids_follow_canonical_order() -> None:
    assert registry.book_for_id(1) == "Genesis"
    assert registry.book_for_id(43) == "John"
    assert registry.book_for_id(66) == "Revelation"
    assert registry.book_for_id(0) is None
    assert registry.book_for_id(67) is None
    assert registry.book_id("John") == 43
    assert registry.book_id("Jn") is None


@pytest.mark.parametrize(
    "reference,prefix",
    [
        ("Song of Solomon 2:1", "Song of Solomon"),
        ("John 3:16", "John"),
        ("1 John 4:8", "1 John"),
        ("1John 4:8", "1John"),
        ("2nd Kings 2:11", "2nd Kings"),
        ("I Samuel 3", "I Samuel"),
        ("Jn. 3:16", "Jn"),
        ("3:16", ""),
        ("", ""),
    ],
)
def test_extract_book_prefix(reference: str, prefix: str) -> None:
    assert registry.extract_book_prefix(reference) == prefix


def test_extract_book_prefix_returns_unknown_numbered_books() -> None:
    # The numbered form is handed back so callers can report the bad book.
    assert registry.extract_book_prefix("4 Kings 1:1") == "4 Kings"
    assert registry.normalize("4 Kings") is None


def test_next_and_previous_chapter_cross_book_boundaries() -> None:
    assert registry.next_chapter("Genesis", 1) == ("Genesis", 2)
    assert registry.next_chapter("Genesis", 50) == ("Exodus", 1)
    assert registry.next_chapter("Malachi", 4) == ("Matthew", 1)
    assert registry.next_chapter("Revelation", 22) is None
    assert registry.previous_chapter("Exodus", 1) == ("Genesis", 50)
    assert registry.previous_chapter("Jn", 3) == ("John", 2)
    assert registry.previous_chapter("Genesis", 1) is None
    assert registry.next_chapter("Nonexistent", 1) is None


def test_suggest_matches_substrings_in_canonical_order() -> None:
    assert registry.suggest("john") == ["John", "1 John", "2 John", "3 John"]
    assert registry.suggest("JOHN", limit=2) == ["John", "1 John"]
    assert registry.suggest("zzz") == []


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Ezekial", "Ezekiel"),
        ("Phile", "Philemon"),
        ("Phlm", "Philemon"),
        ("Philem", "Philemon"),
        ("Philipians", "Philippians"),
    ],
)
def test_prefix_match_prefers_the_longest_key(raw: str, expected: str) -> None:
    assert registry.normalize(raw) == expected
