"""Infrastructure adapter exports."""

from passage_resolver.core.exceptions import FormatError, RemoteFetchError  # noqa: F401

from .corpus_files import load_corpus_file
from .esv import EsvFetcher

__all__ = [
    "EsvFetcher",
    "load_corpus_file",
    "FormatError",
    "RemoteFetchError",
]
