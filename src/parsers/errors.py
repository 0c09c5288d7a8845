from __future__ import annotations

from typing import Optional


class MultitextError(ValueError):
    """
    Base class for malformed multitext documents.
    line_number is 1-based; for NoHeaderFound it is the number of lines scanned.
    """

    def __init__(
        self,
        message: str,
        line_number: int = 0,
        filename: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.filename = filename

    def __str__(self) -> str:
        return f"multitext error: {self.message}: {self.filename or ''}({self.line_number})"


class NoHeaderFound(MultitextError):
    pass


class EmptyMarker(MultitextError):
    pass


class DuplicateKey(MultitextError):
    def __init__(
        self,
        key: str,
        line_number: int = 0,
        filename: Optional[str] = None,
    ) -> None:
        super().__init__(f"duplicate section key {key!r}", line_number, filename)
        self.key = key
