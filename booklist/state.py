"""Book list view state and the reducer that drives it.

Every change to :class:`ViewState` goes through :func:`reduce`, so the
set of reachable states stays small: one operation at a time, at most one
error message, and an edit target that is either a book or ``None``.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple, Sequence

from booklist.models import Book, Draft


class Operation(Enum):
    """Request currently in flight."""
    IDLE = "idle"
    FETCHING = "fetching"
    SAVING = "saving"
    DELETING = "deleting"


@dataclass(frozen=True)
class ViewState:
    """Snapshot of everything the list view renders."""
    books: Tuple[Book, ...] = ()
    draft: Draft = field(default_factory=Draft)
    editing: Optional[Book] = None
    query: str = ""
    operation: Operation = Operation.IDLE
    error: str = ""

    @property
    def busy(self) -> bool:
        return self.operation is not Operation.IDLE

    @property
    def submit_label(self) -> str:
        if self.busy:
            return "Processing..."
        return "Update Book" if self.editing else "Add Book"


# Actions

@dataclass(frozen=True)
class OperationStarted:
    operation: Operation


@dataclass(frozen=True)
class OperationFinished:
    pass


@dataclass(frozen=True)
class BooksLoaded:
    books: Sequence[Book]


@dataclass(frozen=True)
class OperationFailed:
    message: str


@dataclass(frozen=True)
class EditBegun:
    book: Book


@dataclass(frozen=True)
class EditCancelled:
    pass


@dataclass(frozen=True)
class DraftChanged:
    name: str
    value: str


@dataclass(frozen=True)
class DraftSaved:
    pass


@dataclass(frozen=True)
class QueryChanged:
    query: str


def reduce(state: ViewState, action) -> ViewState:
    """Return the state that follows ``action``."""
    if isinstance(action, OperationStarted):
        return replace(state, operation=action.operation)

    if isinstance(action, OperationFinished):
        return replace(state, operation=Operation.IDLE)

    if isinstance(action, BooksLoaded):
        # Wholesale replacement; no merging with what was there before
        return replace(state, books=tuple(action.books), error="")

    if isinstance(action, OperationFailed):
        return replace(state, error=action.message)

    if isinstance(action, EditBegun):
        return replace(state, editing=action.book, draft=Draft.from_book(action.book))

    if isinstance(action, (EditCancelled, DraftSaved)):
        return replace(state, editing=None, draft=Draft())

    if isinstance(action, DraftChanged):
        return replace(state, draft=state.draft.with_field(action.name, action.value))

    if isinstance(action, QueryChanged):
        return replace(state, query=action.query)

    raise TypeError(f"Unknown action: {action!r}")
