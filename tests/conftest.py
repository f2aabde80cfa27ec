"""
Shared fixtures: an in-memory Supabase client and deterministic providers.

FakeSupabaseClient implements the slice of the async PostgREST query
builder the repositories use, including the unique constraints and
ON DELETE CASCADE rules from scripts/setup_knowledge_schema.py.
"""

import copy
import re
import zlib
from typing import Any, Dict, List, Optional

import pytest
from postgrest.exceptions import APIError

from recall.core.config import KnowledgeSettings
from recall.features.database import KnowledgeStore
from recall.shared.constants import SUMMARY_INSTRUCTION, TAGS_INSTRUCTION

UNIQUE_KEYS = {
    "knowledge_items": [("id",), ("source_id",)],
    "embeddings": [("id",)],
    "tags": [("id",), ("name",)],
    "item_tags": [("item_id", "tag_id")],
    "projects": [("id",)],
    "project_items": [("project_id", "item_id")],
    "pages": [("id",)],
    "conversations": [("id",)],
    "transcripts": [("id",)],
}

# parent table -> [(child table, foreign key column)]
CASCADES = {
    "knowledge_items": [("embeddings", "item_id"), ("item_tags", "item_id"), ("project_items", "item_id")],
    "tags": [("item_tags", "tag_id")],
    "projects": [("project_items", "project_id")],
}

_WORD = re.compile(r"[a-z0-9]+")


def _words(text: Optional[str]) -> List[str]:
    return _WORD.findall((text or "").lower())


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, client: "FakeSupabaseClient", table: str):
        self.client = client
        self.table_name = table
        self.op: Optional[str] = None
        self.columns: Optional[List[str]] = None
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.ignore_duplicates = False
        self.filters: List = []
        self.orders: List = []
        self.limit_count: Optional[int] = None
        self.range_bounds: Optional[tuple] = None

    # Operations
    def select(self, columns: str = "*"):
        self.op = "select"
        if columns.strip() != "*":
            self.columns = [c.strip() for c in columns.split(",")]
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, changes):
        self.op = "update"
        self.payload = changes
        return self

    def delete(self):
        self.op = "delete"
        return self

    def upsert(self, payload, on_conflict: Optional[str] = None, ignore_duplicates: bool = False):
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    # Filters and modifiers
    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def wfts(self, column, query):
        terms = _words(query)

        def matches(row):
            words = set(_words(row.get("title")) + _words(row.get("summary")) + _words(row.get("content")))
            return bool(terms) and all(term in words for term in terms)

        self.filters.append(matches)
        return self

    def order(self, column, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def range(self, start, end):
        self.range_bounds = (start, end)
        return self

    async def execute(self):
        self.client.calls.append((self.table_name, self.op))
        failure = self.client.failures.get((self.table_name, self.op))
        if failure is not None:
            raise failure
        return FakeResponse(getattr(self, f"_run_{self.op}")())

    # Execution
    def _rows(self) -> List[Dict[str, Any]]:
        return self.client.tables.setdefault(self.table_name, [])

    def _matching(self) -> List[Dict[str, Any]]:
        return [row for row in self._rows() if all(f(row) for f in self.filters)]

    def _run_select(self):
        rows = self._matching()
        for column, desc in reversed(self.orders):
            rows = sorted(rows, key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
        if self.range_bounds:
            start, end = self.range_bounds
            rows = rows[start:end + 1]
        if self.limit_count is not None:
            rows = rows[:self.limit_count]
        if self.columns:
            rows = [{c: row.get(c) for c in self.columns} for row in rows]
        return copy.deepcopy(rows)

    def _conflicts(self, row, keys) -> bool:
        for existing in self._rows():
            for key in keys:
                values = tuple(row.get(k) for k in key)
                if None in values:
                    continue
                if values == tuple(existing.get(k) for k in key):
                    return True
        return False

    def _run_insert(self):
        rows = self.payload if isinstance(self.payload, list) else [self.payload]
        keys = UNIQUE_KEYS.get(self.table_name, [])
        for row in rows:
            if self._conflicts(row, keys):
                raise APIError({
                    "message": f"duplicate key value violates unique constraint on {self.table_name}",
                    "code": "23505",
                    "hint": None,
                    "details": None,
                })
        self._rows().extend(copy.deepcopy(rows))
        return copy.deepcopy(rows)

    def _run_upsert(self):
        rows = self.payload if isinstance(self.payload, list) else [self.payload]
        key = tuple(c.strip() for c in (self.on_conflict or "id").split(","))
        written = []
        for row in rows:
            match = [r for r in self._rows() if all(r.get(k) == row.get(k) for k in key)]
            if match:
                if not self.ignore_duplicates:
                    match[0].update(copy.deepcopy(row))
                    written.append(copy.deepcopy(match[0]))
                continue
            self._rows().append(copy.deepcopy(row))
            written.append(copy.deepcopy(row))
        return written

    def _run_update(self):
        updated = []
        for row in self._matching():
            row.update(copy.deepcopy(self.payload))
            updated.append(copy.deepcopy(row))
        return updated

    def _run_delete(self):
        doomed = self._matching()
        self.client.tables[self.table_name] = [r for r in self._rows() if r not in doomed]
        for row in doomed:
            self.client.cascade(self.table_name, row)
        return copy.deepcopy(doomed)


class FakeSupabaseClient:
    """In-memory stand-in for supabase.AsyncClient."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.failures: Dict[tuple, Exception] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail(self, table: str, op: str, error: Optional[Exception] = None):
        """Make every ``op`` on ``table`` raise."""
        self.failures[(table, op)] = error or RuntimeError(f"{table} {op} unavailable")

    def seed(self, table: str, *rows: Dict[str, Any]):
        self.tables.setdefault(table, []).extend(copy.deepcopy(list(rows)))

    def cascade(self, table: str, row: Dict[str, Any]):
        for child, column in CASCADES.get(table, []):
            self.tables[child] = [r for r in self.tables.get(child, []) if r.get(column) != row["id"]]
        if table == "knowledge_items":
            for page in self.tables.get("pages", []):
                if page.get("source_item_id") == row["id"]:
                    page["source_item_id"] = None


class FakeEmbeddings:
    """
    Deterministic bag-of-words embeddings.

    Each word is hashed into one of ``dimensions`` buckets, so texts sharing
    words have positive cosine similarity and unrelated texts score ~0.
    """

    def __init__(self, dimensions: int = 64, fail_on_calls=(), error: Optional[Exception] = None):
        self.dimensions = dimensions
        self.fail_on_calls = set(fail_on_calls)
        self.error = error or RuntimeError("embedding service unavailable")
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if len(self.calls) in self.fail_on_calls:
            raise self.error
        vector = [0.0] * self.dimensions
        for word in _words(text):
            vector[zlib.crc32(word.encode()) % self.dimensions] += 1.0
        return vector


class ScriptedCompletions:
    """
    Answers the summary and tag instructions with fixed responses; any
    other instruction (question answering) gets ``answer``.

    A response that is an Exception instance is raised instead.
    """

    def __init__(
        self,
        summary: Any = "A short summary.",
        tags: Any = "Finance, Q3 Planning, roadmap",
        answer: Any = "From your notes: yes.",
    ):
        self.responses = {SUMMARY_INSTRUCTION: summary, TAGS_INSTRUCTION: tags}
        self.answer = answer
        self.calls: List[tuple] = []

    async def complete(self, system_instruction: str, user_message: str) -> str:
        self.calls.append((system_instruction, user_message))
        response = self.responses.get(system_instruction, self.answer)
        if isinstance(response, Exception):
            raise response
        return response


def make_paragraphs(count: int, words_per_paragraph: int = 12) -> str:
    """``count`` distinct paragraphs of a few dozen characters each."""
    paragraphs = []
    for n in range(count):
        words = " ".join(f"topic{n}word{i}" for i in range(words_per_paragraph))
        paragraphs.append(f"{words}.")
    return "\n\n".join(paragraphs)


@pytest.fixture
def client():
    return FakeSupabaseClient()


@pytest.fixture
def store(client):
    return KnowledgeStore(client)


@pytest.fixture
def embeddings():
    return FakeEmbeddings()


@pytest.fixture
def completions():
    return ScriptedCompletions()


@pytest.fixture
def small_settings():
    """Small chunk sizes so a few short paragraphs produce several chunks."""
    return KnowledgeSettings(target_chunk_chars=200, min_chunk_chars=40)
