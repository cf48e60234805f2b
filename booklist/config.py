"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Backend service
    BOOKS_API_URL = os.getenv("BOOKS_API_URL", "http://localhost:3000").rstrip("/")

    # Defaults
    BOOKS_API_TIMEOUT = float(os.getenv("BOOKS_API_TIMEOUT", "10"))
    BOOKS_API_MAX_RETRIES = int(os.getenv("BOOKS_API_MAX_RETRIES", "3"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
