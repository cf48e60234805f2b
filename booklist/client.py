"""HTTP client for the books service with resilience patterns."""
import time
import random
import requests
from typing import Optional, Any
import logging

logger = logging.getLogger(__name__)


class BooksApiClient:
    """Read-only client for the books service with timeouts, retries, and backoff."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        max_retries: int = 3,
        base_backoff: float = 1.0
    ):
        """
        Initialize books service client.

        Args:
            base_url: Service root, e.g. ``http://localhost:3000``
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            base_backoff: Base delay for exponential backoff
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff

        # Create session for connection pooling
        self.session = requests.Session()

    @property
    def books_url(self) -> str:
        return f"{self.base_url}/books"

    def list_books(self) -> Optional[Any]:
        """
        Fetch the whole collection.

        Returns:
            Decoded JSON array or None if all retries failed
        """
        return self._get_with_retry(self.books_url)

    def _get_with_retry(self, url: str) -> Optional[Any]:
        """
        Make a GET request with retry logic.

        Only reads go through here; mutations are never retried.

        Args:
            url: Request URL

        Returns:
            Response JSON or None if all retries exhausted
        """
        for attempt in range(self.max_retries):
            try:
                logger.info(f"Request attempt {attempt + 1}/{self.max_retries}: GET {url}")

                response = self.session.get(url, timeout=self.timeout)

                if 200 <= response.status_code < 300:
                    logger.info(f"Success: {response.status_code}")
                    data = response.json()
                    if not isinstance(data, list):
                        logger.error(f"Expected a JSON array of books, got {type(data).__name__}")
                        return None
                    return data

                elif response.status_code == 429:
                    logger.warning(f"Rate limited (429) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 500:
                    logger.warning(f"Server error ({response.status_code}) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 400:
                    # Client error - don't retry
                    logger.error(f"Client error ({response.status_code}): {response.text}")
                    return None

            except requests.exceptions.Timeout:
                logger.warning(f"Timeout on attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except ValueError as e:
                logger.error(f"Invalid JSON in response: {e}")
                return None

        logger.error(f"All {self.max_retries} attempts failed")
        return None

    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.

        Args:
            attempt: Current attempt number (0-indexed)
        """
        delay = self.base_backoff * (2 ** attempt)
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter

        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
