"""Data models for books and form drafts."""
from dataclasses import dataclass
from typing import Dict


DRAFT_FIELDS = ("title", "author")


@dataclass(frozen=True)
class Book:
    """A book as stored by the backend service."""
    id: str
    title: str
    author: str

    @property
    def label(self) -> str:
        """Format as "title by author"."""
        return f"{self.title} by {self.author}" if self.author else self.title


@dataclass(frozen=True)
class Draft:
    """Unsaved title/author pair edited by a form or dialog."""
    title: str = ""
    author: str = ""

    @classmethod
    def from_book(cls, book: Book) -> "Draft":
        """Seed a draft from an existing book."""
        return cls(title=book.title, author=book.author)

    def is_complete(self) -> bool:
        """Both fields are required.

        Stricter than a plain emptiness check: a value made only of
        whitespace counts as missing.
        """
        return bool(self.title.strip()) and bool(self.author.strip())

    def with_field(self, name: str, value: str) -> "Draft":
        if name not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field: {name}")
        if name == "title":
            return Draft(title=value, author=self.author)
        return Draft(title=self.title, author=value)

    def to_payload(self) -> Dict[str, str]:
        """JSON body for create and update requests."""
        return {"title": self.title, "author": self.author}
