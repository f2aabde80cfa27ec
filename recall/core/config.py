import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

_SUPABASE_URL = os.getenv('SUPABASE_URL')
_SUPABASE_KEY = os.getenv('SUPABASE_KEY')

_OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
_OPENAI_EMBEDDING_MODEL = os.getenv('OPENAI_EMBEDDING_MODEL', 'text-embedding-3-small')

_ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY') or os.getenv('CLAUDE_API_KEY')

_CLAUDE_MODEL_PRIMARY = os.getenv('CLAUDE_MODEL_PRIMARY') or os.getenv('CLAUDE_MODEL', 'claude-sonnet-4-5-20250929')
_CLAUDE_MODEL_FALLBACKS = [
    model.strip()
    for model in os.getenv('CLAUDE_MODEL_FALLBACKS', 'claude-3-5-haiku-20241022').split(',')
    if model.strip()
]
_CLAUDE_MODEL_OPTIONS = [_CLAUDE_MODEL_PRIMARY] + [m for m in _CLAUDE_MODEL_FALLBACKS if m and m != _CLAUDE_MODEL_PRIMARY]


class Config:
    """Central configuration for the knowledge service."""

    SUPABASE_URL = _SUPABASE_URL
    SUPABASE_KEY = _SUPABASE_KEY

    OPENAI_API_KEY = _OPENAI_API_KEY
    OPENAI_EMBEDDING_MODEL = _OPENAI_EMBEDDING_MODEL

    ANTHROPIC_API_KEY = _ANTHROPIC_API_KEY

    CLAUDE_MODEL_PRIMARY = _CLAUDE_MODEL_PRIMARY
    CLAUDE_MODEL_FALLBACKS = _CLAUDE_MODEL_FALLBACKS
    CLAUDE_MODEL_OPTIONS = _CLAUDE_MODEL_OPTIONS

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    ENVIRONMENT = os.getenv('ENVIRONMENT', 'production').lower()


settings = Config()


@dataclass(frozen=True)
class KnowledgeSettings:
    """
    Tuning knobs for chunking and search.

    Passed explicitly to the chunker, embedding pipeline and search engine
    so each can be exercised with different sizes in isolation.
    """

    target_chunk_chars: int = 2000  # ~500 tokens at 4 chars/token
    min_chunk_chars: int = 200
    default_search_limit: int = 10
    keyword_search_limit: int = 20
    hybrid_search_limit: int = 15

    @classmethod
    def from_env(cls) -> "KnowledgeSettings":
        """Build settings from KNOWLEDGE_* environment overrides."""
        defaults = cls()
        return cls(
            target_chunk_chars=int(os.getenv('KNOWLEDGE_TARGET_CHUNK_CHARS', defaults.target_chunk_chars)),
            min_chunk_chars=int(os.getenv('KNOWLEDGE_MIN_CHUNK_CHARS', defaults.min_chunk_chars)),
            default_search_limit=int(os.getenv('KNOWLEDGE_SEARCH_LIMIT', defaults.default_search_limit)),
            keyword_search_limit=int(os.getenv('KNOWLEDGE_KEYWORD_LIMIT', defaults.keyword_search_limit)),
            hybrid_search_limit=int(os.getenv('KNOWLEDGE_HYBRID_LIMIT', defaults.hybrid_search_limit)),
        )


DEFAULT_KNOWLEDGE_SETTINGS = KnowledgeSettings()
