"""Book list controller: local mirror of the remote collection plus the edit form."""
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterable, List, Optional
import logging

from booklist.async_client import AsyncBooksApiClient
from booklist.dialog import EditDialog
from booklist.exceptions import BooksApiError
from booklist.models import Book, Draft
from booklist.parse import parse_books_response, deduplicate_books
from booklist.state import (
    ViewState, Operation, reduce,
    OperationStarted, OperationFinished, BooksLoaded, OperationFailed,
    EditBegun, EditCancelled, DraftChanged, DraftSaved, QueryChanged,
)

logger = logging.getLogger(__name__)

FETCH_ERROR = "Failed to fetch books. Please check the backend server."
VALIDATION_ERROR = "Title and author are required."
SAVE_ERROR = "Failed to add/update book. Please try again."
NOT_FOUND_ERROR = "Book not found."
DELETE_ERROR = "Failed to delete book. Please try again."

DELETE_PROMPT = "Are you sure you want to delete this book?"


@dataclass(frozen=True)
class Result:
    """Outcome of one handler call.

    ``skipped`` is set when nothing was attempted: another operation was
    in flight, or the user declined a confirmation.
    """
    ok: bool
    error: str = ""
    skipped: bool = False


OK = Result(ok=True)
SKIPPED = Result(ok=False, skipped=True)


def filter_books(books: Iterable[Book], query: str) -> List[Book]:
    """Books whose title or author contains ``query``, ignoring case."""
    needle = query.lower()
    return [
        book for book in books
        if needle in book.title.lower() or needle in book.author.lower()
    ]


class BookListView:
    """Keeps a local copy of the books collection consistent with the service.

    The collection is never patched locally: every successful create,
    update or delete is followed by a full re-fetch. Only one request runs
    at a time; triggers that arrive while one is in flight are rejected
    with a skipped :class:`Result`. ``cancel_edit`` and ``search`` are the
    exceptions since they never touch the network.
    """

    def __init__(self, client: AsyncBooksApiClient, confirm: Callable[[str], bool]):
        """
        Args:
            client: Books service client
            confirm: Blocking yes/no prompt used before deleting
        """
        self.client = client
        self.confirm = confirm
        self.state = ViewState()
        self.dialog: Optional[EditDialog] = None
        self._closed = False

    # Read-only views of the state

    @property
    def books(self) -> List[Book]:
        return list(self.state.books)

    @property
    def visible_books(self) -> List[Book]:
        return filter_books(self.state.books, self.state.query)

    @property
    def draft(self) -> Draft:
        return self.state.draft

    @property
    def editing(self) -> Optional[Book]:
        return self.state.editing

    @property
    def error(self) -> str:
        return self.state.error

    @property
    def busy(self) -> bool:
        return self.state.busy

    @property
    def closed(self) -> bool:
        return self._closed

    # Handlers

    async def fetch_all(self) -> Result:
        """Replace the local collection with the server's."""
        if self.state.busy:
            return self._rejected("fetch")
        return await self._fetch()

    async def submit(self, draft: Optional[Draft] = None) -> Result:
        """
        Create a book, or update the edit target if there is one.

        Args:
            draft: Values to submit; defaults to the form draft

        Returns:
            Result of the save, or of the resync that follows it
        """
        if self.state.busy:
            return self._rejected("submit")

        if draft is not None:
            self._dispatch(DraftChanged("title", draft.title))
            self._dispatch(DraftChanged("author", draft.author))
        draft = self.state.draft

        if not draft.is_complete():
            self._dispatch(OperationFailed(VALIDATION_ERROR))
            return Result(ok=False, error=VALIDATION_ERROR)

        result = await self._save(self.state.editing, draft)
        if not result.ok:
            return result

        self._dispatch(DraftSaved())
        return await self._fetch()

    def begin_edit(self, book: Book) -> Result:
        """Switch the form to edit ``book``; calling again retargets."""
        if self.state.busy:
            return self._rejected("edit")
        self._dispatch(EditBegun(book))
        return OK

    def cancel_edit(self):
        """Back to create mode with an empty draft."""
        self._dispatch(EditCancelled())

    def update_draft(self, name: str, value: str):
        """Change one form field (``title`` or ``author``)."""
        self._dispatch(DraftChanged(name, value))

    def search(self, query: str):
        self._dispatch(QueryChanged(query))

    async def delete(self, book_id: str) -> Result:
        """
        Delete a book after asking for confirmation.

        The edit target is left alone even when it is the deleted book.
        """
        if self.state.busy:
            return self._rejected("delete")

        if not self.confirm(DELETE_PROMPT):
            logger.info(f"Delete of {book_id} declined")
            return SKIPPED

        if self.state.editing and self.state.editing.id == book_id:
            logger.warning(f"Deleting book {book_id} while it is being edited; edit target kept")

        def error_for(e: BooksApiError) -> str:
            return NOT_FOUND_ERROR if e.is_not_found else DELETE_ERROR

        result = await self._mutate(
            Operation.DELETING,
            partial(self.client.delete_book, book_id),
            error_for
        )
        if not result.ok:
            return result
        return await self._fetch()

    # Dialog editing

    def open_dialog(self, book: Book) -> Optional[EditDialog]:
        """Open an :class:`EditDialog` for ``book``; None while busy."""
        if self.state.busy:
            self._rejected("edit dialog")
            return None
        self.dialog = EditDialog(book, on_close=self._clear_dialog)
        return self.dialog

    async def save_dialog(self) -> Result:
        """
        Send the open dialog's draft as an update of its book.

        The dialog is closed on success and left open on failure so the
        user can retry.
        """
        if self.dialog is None:
            return SKIPPED
        if self.state.busy:
            return self._rejected("dialog save")

        dialog = self.dialog
        draft = dialog.confirm()
        if draft is None:
            return Result(ok=False, error=VALIDATION_ERROR)

        result = await self._save(dialog.book, draft)
        if not result.ok:
            return result

        if self.dialog is dialog:
            self.dialog = None
        return await self._fetch()

    def dismiss_dialog(self):
        if self.dialog is not None:
            self.dialog.dismiss()

    # Teardown

    def close(self):
        """Tear the view down; responses that arrive later are discarded."""
        self._closed = True
        self.dialog = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # Internals

    def _dispatch(self, action):
        if self._closed:
            logger.debug(f"View closed, discarding {type(action).__name__}")
            return
        self.state = reduce(self.state, action)

    def _rejected(self, name: str) -> Result:
        logger.debug(f"Ignoring {name} while {self.state.operation.value} is in flight")
        return SKIPPED

    def _clear_dialog(self):
        self.dialog = None

    async def _fetch(self) -> Result:
        # A torn-down view never resyncs, including after a late mutation response
        if self._closed:
            logger.debug("View closed, skipping fetch")
            return SKIPPED
        self._dispatch(OperationStarted(Operation.FETCHING))
        try:
            data = await self.client.list_books()
            books = deduplicate_books(parse_books_response(data))
            self._dispatch(BooksLoaded(books))
            logger.info(f"Loaded {len(books)} books")
            return OK
        except BooksApiError as e:
            logger.error(f"Error fetching books: {e}")
            self._dispatch(OperationFailed(FETCH_ERROR))
            return Result(ok=False, error=FETCH_ERROR)
        finally:
            self._dispatch(OperationFinished())

    async def _save(self, target: Optional[Book], draft: Draft) -> Result:
        if target:
            request = partial(self.client.update_book, target.id, draft.to_payload())
        else:
            request = partial(self.client.create_book, draft.to_payload())
        return await self._mutate(Operation.SAVING, request, lambda e: SAVE_ERROR)

    async def _mutate(self, operation: Operation, request, error_for) -> Result:
        """Run one mutating request; the operation always ends in IDLE."""
        self._dispatch(OperationStarted(operation))
        try:
            await request()
        except BooksApiError as e:
            message = error_for(e)
            logger.error(f"Error {operation.value} book: {e}")
            self._dispatch(OperationFailed(message))
            return Result(ok=False, error=message)
        finally:
            self._dispatch(OperationFinished())
        return OK
