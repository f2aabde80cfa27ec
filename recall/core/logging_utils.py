"""
Logging utilities for safe logging of user content.

Includes:
- Truncation and control-character stripping for conversation text
- Structured usage logging for completion calls
"""
import json
import logging
import re
from typing import Any, Optional


# Keys whose values never belong in logs
SENSITIVE_KEYS = [
    "api_key", "token", "password", "secret", "auth",
    "authorization", "bearer",
]


def sanitize_for_logging(data: Any, max_len: int = 100) -> Any:
    """
    Sanitize data for safe logging - redacts secrets and truncates text.

    Args:
        data: The data to sanitize (can be dict, list, str, or other types)
        max_len: Maximum length for string values before truncation

    Returns:
        Sanitized version of the data safe for logging
    """
    if data is None:
        return "None"

    if isinstance(data, dict):
        sanitized = {}
        for k, v in data.items():
            if any(sensitive in k.lower() for sensitive in SENSITIVE_KEYS):
                sanitized[k] = "***REDACTED***"
            else:
                sanitized[k] = sanitize_for_logging(v, max_len)
        return sanitized

    if isinstance(data, list):
        return [sanitize_for_logging(item, max_len) for item in data]

    if isinstance(data, str):
        # Single-line output: drop newlines and other control characters
        cleaned = re.sub(r'[\x00-\x1F\x7F]', ' ', data)
        cleaned = re.sub(r' {2,}', ' ', cleaned).strip()
        if len(cleaned) > max_len:
            return cleaned[:max_len] + "..."
        return cleaned

    return sanitize_for_logging(str(data), max_len)


# =============================================================================
# STRUCTURED USAGE LOGGING
# =============================================================================

_usage_logger = logging.getLogger("Recall.Usage")


def log_llm_usage(
    model: str,
    input_tokens: int,
    output_tokens: int,
    duration_ms: Optional[int] = None,
    purpose: str = "unknown",
) -> None:
    """
    Log a structured usage event for a completion call.

    Produces a single JSON log line so token spend per purpose
    (summary, tags) can be aggregated from the logs.

    Args:
        model: Model identifier
        input_tokens: Number of input tokens
        output_tokens: Number of output tokens
        duration_ms: Request duration in milliseconds
        purpose: What the completion was for ('summary', 'tags', ...)
    """
    event = {
        "event": "llm_usage",
        "model": model,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
        "purpose": purpose,
    }

    if duration_ms is not None:
        event["duration_ms"] = duration_ms

    _usage_logger.info("LLM_USAGE %s", json.dumps(event))
