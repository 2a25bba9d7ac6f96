from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ShopDataError(Exception):
    """Raised when the data directory cannot produce a consistent result."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Union[str, Path]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None
        self.cause = cause

    def __str__(self) -> str:
        text = self.message
        if self.path is not None and str(self.path) not in text:
            text = f"{text} ({self.path})"
        if self.cause is not None:
            text = f"{text}: {self.cause}"
        return text


class DataIOError(ShopDataError):
    """Raised when a source or the data directory is missing or unreadable."""


class MissingSourceError(DataIOError):
    """Raised when a mandatory table file is absent."""


class DataParseError(ShopDataError):
    """Raised when a header or row does not match the table schema."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Union[str, Path]] = None,
        line: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message, path=path, cause=cause)
        self.line = line
