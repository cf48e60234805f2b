"""Async HTTP client for the books service."""
import httpx
from typing import Optional, Dict, Any, List
import logging

from booklist.exceptions import BooksApiError

logger = logging.getLogger(__name__)


class AsyncBooksApiClient:
    """Async client covering the create/read/update/delete endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: Service root, e.g. ``http://localhost:3000``
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport
        )

    async def list_books(self) -> List[Any]:
        """GET /books and return the decoded JSON array."""
        response = await self._request("GET", "/books")
        try:
            data = response.json()
        except ValueError as e:
            raise BooksApiError(f"Invalid JSON from GET /books: {e}", response.status_code) from e

        if not isinstance(data, list):
            logger.error(f"Expected a JSON array from GET /books, got {type(data).__name__}")
            raise BooksApiError(
                f"GET /books returned {type(data).__name__}, expected a list",
                response.status_code
            )
        return data

    async def create_book(self, payload: Dict[str, str]) -> None:
        """POST /books; the server assigns the id."""
        await self._request("POST", "/books", json=payload)

    async def update_book(self, book_id: str, payload: Dict[str, str]) -> None:
        """PUT /books/<id>."""
        await self._request("PUT", f"/books/{book_id}", json=payload)

    async def delete_book(self, book_id: str) -> None:
        """DELETE /books/<id>."""
        await self._request("DELETE", f"/books/{book_id}")

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """
        Send one request without retrying.

        Raises:
            BooksApiError: on transport failure or any non-2xx status
        """
        try:
            logger.info(f"Async request: {method} {path}")
            response = await self.client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise BooksApiError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            logger.warning(f"Status {response.status_code} for {method} {path}")
            raise BooksApiError(
                f"{method} {path} returned {response.status_code}",
                response.status_code
            )

        return response

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
