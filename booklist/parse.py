"""Parse and normalize books service responses."""
from typing import Dict, Any, List, Optional
import logging

from booklist.models import Book

logger = logging.getLogger(__name__)


def parse_book(item: Dict[str, Any]) -> Optional[Book]:
    """
    Parse a single book document returned by the service.

    Args:
        item: One element of the ``GET /books`` array

    Returns:
        Book object or None if the item has no id
    """
    if not isinstance(item, dict):
        logger.warning(f"Skipping malformed book item: {item!r}")
        return None

    # The service assigns Mongo-style ids; accept a plain "id" as well
    book_id = item.get("_id") or item.get("id")
    if not book_id:
        return None

    title = item.get("title")
    author = item.get("author")

    # Coerce so numeric titles like 1984 stay searchable
    return Book(
        id=str(book_id),
        title="" if title is None else str(title),
        author="" if author is None else str(author)
    )


def parse_books_response(response_json: Any) -> List[Book]:
    """
    Parse the full ``GET /books`` response.

    Args:
        response_json: Decoded JSON body, expected to be a list

    Returns:
        List of Book objects in server order (empty if the body is not a list)
    """
    if not isinstance(response_json, list):
        logger.warning(f"Expected a JSON array of books, got {type(response_json).__name__}")
        return []

    books = []
    for item in response_json:
        book = parse_book(item)
        if book:
            books.append(book)

    return books


def deduplicate_books(books: List[Book]) -> List[Book]:
    """
    Remove duplicate books by ID, keeping the first occurrence.

    Args:
        books: List of Book objects

    Returns:
        Deduplicated list of books
    """
    seen_ids = set()
    unique_books = []

    for book in books:
        if book.id not in seen_ids:
            seen_ids.add(book.id)
            unique_books.append(book)

    return unique_books
