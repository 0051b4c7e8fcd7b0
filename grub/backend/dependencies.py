"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from grub.backend.completion import (
    CompletionClient,
    GeminiCompletionClient,
    InMemoryCompletionClient,
)
from grub.backend.config import get_settings
from grub.backend.db import DbClient, InMemoryDbClient, PostgresDbClient

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_completion_client: CompletionClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so stored state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = PostgresDbClient(settings.database_url)
    return _db_client


def get_completion_client() -> CompletionClient:
    """
    Return a singleton completion client; scripted in-memory without an API key.
    """
    global _completion_client
    if _completion_client:
        return _completion_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.gemini_api_key:
        logger.warning("No Gemini API key configured, using in-memory completions")
        _completion_client = InMemoryCompletionClient()
    else:
        _completion_client = GeminiCompletionClient(
            api_key=settings.gemini_api_key,
            timeout_seconds=settings.completion_timeout_seconds,
            max_retries=settings.completion_max_retries,
        )
    return _completion_client


def close_clients() -> None:
    """Release client handles at process shutdown."""
    global _db_client, _completion_client
    if _db_client:
        _db_client.close()
        _db_client = None
    if _completion_client:
        _completion_client.close()
        _completion_client = None
