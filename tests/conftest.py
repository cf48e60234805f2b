"""Shared fixtures: an in-memory books service behind httpx.MockTransport."""
import json

import httpx
import pytest

from booklist.async_client import AsyncBooksApiClient
from booklist.view import BookListView

BASE_URL = "http://books.test"


class FakeBooksBackend:
    """Minimal stand-in for the books REST service."""

    def __init__(self, books=None):
        self.books = [dict(book) for book in (books or [])]
        self.requests = []
        # method -> status code to answer with instead of the normal response
        self.fail = {}
        # methods that raise a transport error
        self.unreachable = set()
        # when set, GET /books returns this instead of the stored books
        self.snapshot = None
        # when set, mutating requests wait for it before answering
        self.gate = None
        self._next_id = 100

    def calls(self, method=None):
        return [r for r in self.requests if method is None or r[0] == method]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))

        if request.method in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)

        if self.gate is not None and request.method != "GET":
            await self.gate.wait()

        if request.method in self.fail:
            return httpx.Response(self.fail[request.method], json={"message": "error"})

        parts = request.url.path.strip("/").split("/")
        book_id = parts[1] if len(parts) > 1 else None

        if request.method == "GET":
            return httpx.Response(200, json=self.snapshot if self.snapshot is not None else self.books)

        if request.method == "POST":
            self._next_id += 1
            book = {"_id": str(self._next_id), **body}
            self.books.append(book)
            return httpx.Response(201, json=book)

        existing = next((b for b in self.books if b["_id"] == book_id), None)
        if existing is None:
            return httpx.Response(404, json={"message": "Book not found"})

        if request.method == "PUT":
            existing.update(body)
            return httpx.Response(200, json=existing)

        self.books.remove(existing)
        return httpx.Response(200, json={"message": "Book deleted"})


@pytest.fixture
def backend():
    return FakeBooksBackend([
        {"_id": "1", "title": "The Hobbit", "author": "J.R.R. Tolkien"},
        {"_id": "2", "title": "Dune", "author": "Frank Herbert"},
        {"_id": "3", "title": "Emma", "author": "Jane Austen"},
    ])


@pytest.fixture
def make_view(backend):
    """Factory for views wired to the fake backend."""
    def factory(confirm=lambda message: True):
        client = AsyncBooksApiClient(BASE_URL, transport=httpx.MockTransport(backend.handler))
        return BookListView(client, confirm=confirm)
    return factory
