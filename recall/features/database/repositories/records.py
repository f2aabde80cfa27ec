"""Row helpers shared by the repositories: ids, timestamps, conflict detection."""

import time
import uuid
from typing import Any

from postgrest.exceptions import APIError

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def is_unique_violation(exc: Exception) -> bool:
    return isinstance(exc, APIError) and exc.code == UNIQUE_VIOLATION


# Marks an update argument that was not passed, so None can mean "clear"
UNSET: Any = object()
