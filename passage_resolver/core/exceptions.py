"""Core exception types shared across layers."""


class LocatorError(ValueError):
    """Raised when a Locator is constructed in violation of its invariants."""


class FormatError(ValueError):
    """Raised when a corpus payload has an unrecognized or inconsistent shape."""


class RemoteFetchError(Exception):
    """Raised by a fetch collaborator that cannot produce a ``FetchResult``."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "LocatorError",
    "FormatError",
    "RemoteFetchError",
]
