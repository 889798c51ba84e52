"""Validated value types.

Each type is an immutable ``int`` or ``str`` subclass whose constructor
rejects invalid input with ``ValueError``; values are never coerced.
"""

import re

MAX_TITLE_LENGTH = 255
MAX_ISBN_LENGTH = 50

_URL_PATTERN = re.compile(r"^(https?://)?[\w.-]+(\.[a-zA-Z]{2,})+.*$")


def _require_int(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    return value


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}")
    return value


class EntityId(int):
    """Positive integer identifier of a category or reference."""

    def __new__(cls, value: int) -> "EntityId":
        if _require_int(value, "id") <= 0:
            raise ValueError("id must be positive")
        return super().__new__(cls, value)


class Version(int):
    """Optimistic-lock version of a category aggregate."""

    def __new__(cls, value: int) -> "Version":
        if _require_int(value, "version") < 0:
            raise ValueError("version must be non-negative")
        return super().__new__(cls, value)

    def next(self) -> "Version":
        return Version(self + 1)


INITIAL_VERSION = Version(1)


class Title(str):
    """Title of a category or reference (1 to 255 characters)."""

    def __new__(cls, value: str) -> "Title":
        _require_str(value, "title")
        if not value:
            raise ValueError("title cannot be empty")
        if len(value) > MAX_TITLE_LENGTH:
            raise ValueError(f"title too long (max {MAX_TITLE_LENGTH})")
        return super().__new__(cls, value)


class ISBN(str):
    def __new__(cls, value: str) -> "ISBN":
        _require_str(value, "ISBN")
        if not value:
            raise ValueError("ISBN cannot be empty")
        if len(value) > MAX_ISBN_LENGTH:
            raise ValueError(f"ISBN too long (max {MAX_ISBN_LENGTH})")
        return super().__new__(cls, value)


class URL(str):
    def __new__(cls, value: str) -> "URL":
        _require_str(value, "URL")
        if not value:
            raise ValueError("URL cannot be empty")
        if not _URL_PATTERN.match(value):
            raise ValueError("invalid URL format")
        return super().__new__(cls, value)
