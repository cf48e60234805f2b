"""Errors raised by the books API clients."""
from typing import Optional


class BooksApiError(Exception):
    """A request to the books service failed.

    ``status_code`` is None when no response was received at all
    (connection refused, timeout, ...).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404
