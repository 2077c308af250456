"""Exception types raised by common-films."""

from __future__ import annotations


class CommonFilmsError(Exception):
    """Base class for all common-films errors."""


class FetchError(CommonFilmsError):
    """A page could not be fetched (transport failure or non-success status)."""

    def __init__(self, locator: str, reason: str) -> None:
        super().__init__(f"{locator}: {reason}")
        self.locator = locator
        self.reason = reason
