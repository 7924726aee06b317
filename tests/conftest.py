"""Pytest configuration: ensure env vars and import path are set early.

This runs before any tests, so modules can import without local path hacks.
Also load .env before setting defaults so real settings are used when present.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest
from dotenv import load_dotenv

# Ensure repository root is on sys.path for local package imports
sys.path.append(str(Path(__file__).resolve().parents[1]))

# Load .env first so a real ESV token is available for manual runs
load_dotenv(override=False)

# Keep log files inside the test tree unless configured otherwise
os.environ.setdefault(
    "PASSAGE_RESOLVER_LOG_DIR", str(Path(__file__).resolve().parent / ".logs")
)

SAMPLE_CORPUS: Dict[str, Any] = {
    "Genesis": {
        "1": {
            "1": "In the beginning, God created the heavens and the earth.",
            "2": "The earth was without form and void.",
            "3": 'And God said, "Let there be light," and there was light.',
        },
    },
    "John": {
        "3": {
            "16": "For God so loved the world, that he gave his only Son.",
            "17": "For God did not send his Son into the world to condemn the world.",
            "18": "Whoever believes in him is not condemned.",
        },
    },
    "Philippians": {
        "1": {
            "27": "Only let your manner of life be worthy of the gospel of Christ.",
            "28": "And not frightened in anything by your opponents.",
        },
        "2": {
            "1": "So if there is any encouragement in Christ.",
            "2": "Complete my joy by being of the same mind.",
            "11": "And every tongue confess that Jesus Christ is Lord.",
        },
    },
}


@pytest.fixture
def sample_corpus() -> Dict[str, Any]:
    """A small structured corpus covering single, range, and cross-chapter lookups."""
    return {
        book: {chapter: dict(verses) for chapter, verses in chapters.items()}
        for book, chapters in SAMPLE_CORPUS.items()
    }
