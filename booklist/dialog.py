"""Modal editor for a single book."""
from typing import Callable, Optional

from booklist.models import Book, Draft


class EditDialog:
    """Holds a local draft of one book and reports the outcome upward.

    The dialog never talks to the books service. ``on_save`` receives the
    confirmed draft and ``on_close`` is called on dismissal; the owner
    decides what to do with either.
    """

    def __init__(
        self,
        book: Book,
        on_save: Optional[Callable[[Draft], None]] = None,
        on_close: Optional[Callable[[], None]] = None
    ):
        self.book = book
        self.draft = Draft.from_book(book)
        self.on_save = on_save
        self.on_close = on_close

    def update_field(self, name: str, value: str):
        """Change ``title`` or ``author`` in the local draft."""
        self.draft = self.draft.with_field(name, value)

    def confirm(self) -> Optional[Draft]:
        """
        Emit the current draft.

        A blank field blocks the submission, the same way a required
        form input would, and nothing is emitted.

        Returns:
            The emitted draft or None
        """
        if not self.draft.is_complete():
            return None
        if self.on_save:
            self.on_save(self.draft)
        return self.draft

    def dismiss(self):
        """Report a cancellation with no draft."""
        if self.on_close:
            self.on_close()
