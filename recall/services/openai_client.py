"""
Shared OpenAI client.

Centralizes OpenAI API access for embeddings.
"""

import logging
from functools import lru_cache

from openai import AsyncOpenAI

from recall.core.config import settings

logger = logging.getLogger("Recall.Services.OpenAI")


@lru_cache(maxsize=1)
def get_openai_client() -> AsyncOpenAI:
    """
    Get the singleton OpenAI async client.

    Raises:
        ValueError: If OPENAI_API_KEY is not set
    """
    if not settings.OPENAI_API_KEY:
        raise ValueError("OPENAI_API_KEY environment variable not set")

    client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
    logger.info("OpenAI client initialized")
    return client
