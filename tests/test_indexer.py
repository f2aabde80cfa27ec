"""Tests for indexing conversations and transcripts into knowledge items."""

from typing import Dict, List, Optional

import pytest

from recall.features.database.models import SourceDocument
from recall.features.knowledge.embedding import EmbeddingPipeline
from recall.features.knowledge.indexer import KnowledgeIndexer, build_title, parse_tags
from recall.shared.constants import SUMMARY_INSTRUCTION, TAGS_INSTRUCTION
from recall.shared.correlation import get_correlation_id

from tests.conftest import FakeEmbeddings, ScriptedCompletions, make_paragraphs


def _seed_conversation(client, conversation_id="conv-1", title="Budget review", messages=None):
    client.seed("conversations", {
        "id": conversation_id,
        "title": title,
        "messages": messages or [
            {"role": "user", "content": "Can we go over the Q3 budget?"},
            {"role": "assistant", "content": "Sure, the finance numbers look tight this quarter."},
        ],
        "created_at": "2026-01-01T00:00:00Z",
    })


def _indexer(store, embeddings, completions, settings=None, source=None):
    pipeline = EmbeddingPipeline(store, embeddings, settings)
    return KnowledgeIndexer(store, pipeline, completions, source or store.conversations)


class StaticSource:
    """In-memory document source for batch tests."""

    label = "Conversation"

    def __init__(self, documents: Dict[str, SourceDocument], ids: List[str]):
        self.documents = documents
        self.ids = ids
        self.correlation_ids: List[Optional[str]] = []

    async def get_document(self, source_id):
        self.correlation_ids.append(get_correlation_id())
        return self.documents.get(source_id)

    async def list_ids(self):
        return list(self.ids)


class TestParseTags:
    def test_normalizes(self):
        assert parse_tags("Finance, Q3 Planning, roadmap") == ["finance", "q3-planning", "roadmap"]

    def test_drops_empty_entries(self):
        assert parse_tags(" , alpha,, beta ,") == ["alpha", "beta"]

    def test_collapses_whitespace_runs(self):
        assert parse_tags("Deep   \t Work") == ["deep-work"]

    def test_length_limit(self):
        thirty = "a" * 30
        assert parse_tags(f"{thirty}, {'b' * 31}") == [thirty]

    def test_caps_at_five(self):
        assert parse_tags("a, b, c, d, e, f, g") == ["a", "b", "c", "d", "e"]


class TestBuildTitle:
    def test_source_title_wins(self):
        doc = SourceDocument(id="1", content="x" * 200, item_type="conversation", title="Weekly sync")
        assert build_title(doc) == "Weekly sync"

    def test_long_content_is_truncated_with_ellipsis(self):
        doc = SourceDocument(id="1", content="x" * 200, item_type="conversation")
        assert build_title(doc) == "x" * 80 + "…"

    def test_short_content_is_not_marked(self):
        doc = SourceDocument(id="1", content="Short note", item_type="conversation")
        assert build_title(doc) == "Short note"


class TestIndexSource:
    @pytest.mark.asyncio
    async def test_indexes_conversation(self, client, store, embeddings, completions):
        _seed_conversation(client)

        result = await _indexer(store, embeddings, completions).index_source("conv-1")

        assert result.success and result.created
        assert result.error is None
        assert result.warnings == []

        item = await store.items.get_by_id(result.item_id)
        assert item.type == "conversation"
        assert item.title == "Budget review"
        assert item.source_id == "conv-1"
        assert item.summary == "A short summary."
        assert item.content.startswith("[user]: Can we go over the Q3 budget?\n\n[assistant]: ")
        assert await store.embeddings.count_for_item(item.id) == 1

    @pytest.mark.asyncio
    async def test_auto_tags_are_normalized_and_flagged(self, client, store, embeddings, completions):
        _seed_conversation(client)

        result = await _indexer(store, embeddings, completions).index_source("conv-1")

        tags = await store.tags.list_for_item(result.item_id)
        assert sorted(t.name for t in tags) == ["finance", "q3-planning", "roadmap"]
        assert all(t.is_auto for t in tags)

    @pytest.mark.asyncio
    async def test_completion_inputs_are_capped(self, client, store, embeddings, completions):
        long_message = "word " * 5000
        _seed_conversation(client, messages=[{"role": "user", "content": long_message}])

        await _indexer(store, embeddings, completions).index_source("conv-1")

        sent = dict(completions.calls)
        assert len(sent[SUMMARY_INSTRUCTION]) == 12000
        assert len(sent[TAGS_INSTRUCTION]) == 8000

    @pytest.mark.asyncio
    async def test_reindex_is_a_noop(self, client, store, embeddings, completions):
        _seed_conversation(client)
        indexer = _indexer(store, embeddings, completions)
        first = await indexer.index_source("conv-1")
        calls_before = (len(completions.calls), len(embeddings.calls))

        second = await indexer.index_source("conv-1")

        assert second.success
        assert not second.created
        assert second.item_id == first.item_id
        assert (len(completions.calls), len(embeddings.calls)) == calls_before
        assert len(client.tables["knowledge_items"]) == 1

    @pytest.mark.asyncio
    async def test_missing_conversation(self, store, embeddings, completions):
        result = await _indexer(store, embeddings, completions).index_source("nope")

        assert not result.success
        assert result.error == "Conversation not found"
        assert completions.calls == []

    @pytest.mark.asyncio
    async def test_missing_transcript(self, store, embeddings, completions):
        indexer = _indexer(store, embeddings, completions, source=store.transcripts)
        result = await indexer.index_source("nope")
        assert result.error == "Transcript not found"

    @pytest.mark.asyncio
    async def test_transcript_uses_file_name_as_title(self, client, store, embeddings, completions):
        client.seed("transcripts", {
            "id": "tr-1",
            "source_file": "standup-2026-03-02.m4a",
            "full_text": "We agreed to move the launch to April.",
            "created_at": "2026-03-02T09:00:00Z",
        })
        indexer = _indexer(store, embeddings, completions, source=store.transcripts)

        result = await indexer.index_source("tr-1")

        item = await store.items.get_by_id(result.item_id)
        assert item.type == "transcription"
        assert item.title == "standup-2026-03-02.m4a"

    @pytest.mark.asyncio
    async def test_untitled_conversation_gets_preview_title(self, client, store, embeddings, completions):
        _seed_conversation(client, title=None, messages=[{"role": "user", "content": "z" * 120}])

        result = await _indexer(store, embeddings, completions).index_source("conv-1")

        item = await store.items.get_by_id(result.item_id)
        assert item.title == ("[user]: " + "z" * 120)[:80] + "…"

    @pytest.mark.asyncio
    async def test_summary_failure_is_a_warning(self, client, store, embeddings):
        _seed_conversation(client)
        completions = ScriptedCompletions(summary=RuntimeError("overloaded"))

        result = await _indexer(store, embeddings, completions).index_source("conv-1")

        assert result.success and result.created
        assert result.error is None
        assert any("Summary generation failed" in w for w in result.warnings)
        item = await store.items.get_by_id(result.item_id)
        assert item.summary is None

    @pytest.mark.asyncio
    async def test_blank_summary_is_stored_as_none(self, client, store, embeddings):
        _seed_conversation(client)
        completions = ScriptedCompletions(summary="   ")

        result = await _indexer(store, embeddings, completions).index_source("conv-1")

        item = await store.items.get_by_id(result.item_id)
        assert item.summary is None
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_tag_failure_is_a_warning(self, client, store, embeddings):
        _seed_conversation(client)
        completions = ScriptedCompletions(tags=RuntimeError("overloaded"))

        result = await _indexer(store, embeddings, completions).index_source("conv-1")

        assert result.success
        assert result.error is None
        assert any("Tag generation failed" in w for w in result.warnings)
        assert await store.tags.list_for_item(result.item_id) == []

    @pytest.mark.asyncio
    async def test_embedding_failure_keeps_item_and_tags(self, client, store, completions, small_settings):
        paragraphs = make_paragraphs(3).split("\n\n")
        _seed_conversation(client, messages=[{"role": "user", "content": p} for p in paragraphs])
        failing = FakeEmbeddings(fail_on_calls={2}, error=RuntimeError("timeout"))

        result = await _indexer(store, failing, completions, small_settings).index_source("conv-1")

        assert result.success and result.created
        assert result.error == "Chunk 2/3: timeout"
        item = await store.items.get_by_id(result.item_id)
        assert item.summary == "A short summary."
        assert await store.embeddings.count_for_item(item.id) == 1
        assert len(await store.tags.list_for_item(item.id)) == 3

    @pytest.mark.asyncio
    async def test_item_creation_failure(self, client, store, embeddings, completions):
        _seed_conversation(client)
        client.fail("knowledge_items", "insert", RuntimeError("read-only replica"))

        result = await _indexer(store, embeddings, completions).index_source("conv-1")

        assert not result.success
        assert result.error == "read-only replica"
        assert embeddings.calls == []

    @pytest.mark.asyncio
    async def test_existing_tag_is_reused(self, client, store, embeddings, completions):
        manual = await store.tags.create("finance", color="#00aa00", is_auto=False)
        _seed_conversation(client)

        result = await _indexer(store, embeddings, completions).index_source("conv-1")

        tags = {t.name: t for t in await store.tags.list_for_item(result.item_id)}
        assert tags["finance"].id == manual.id
        assert not tags["finance"].is_auto
        assert len(client.tables["tags"]) == 3


class TestIndexAllSources:
    @pytest.mark.asyncio
    async def test_counts_and_continues(self, store, embeddings, completions):
        docs = {
            "a": SourceDocument(id="a", content="First conversation text.", item_type="conversation"),
            "b": SourceDocument(id="b", content="Second conversation text.", item_type="conversation"),
        }
        source = StaticSource(docs, ["a", "ghost", "b"])
        indexer = _indexer(store, embeddings, completions, source=source)

        batch = await indexer.index_all_sources()

        assert batch.indexed == 2
        assert batch.failed == 1
        assert batch.errors == ["ghost: Conversation not found"]

    @pytest.mark.asyncio
    async def test_embedding_store_failure_does_not_abort(self, client, store, embeddings, completions):
        _seed_conversation(client, "conv-1")
        _seed_conversation(client, "conv-2", title="Hiring plan")
        client.fail("embeddings", "delete")

        batch = await _indexer(store, embeddings, completions).index_all_sources()

        assert (batch.indexed, batch.failed) == (2, 0)
        item = await store.items.get_by_source_id("conv-2")
        assert item.summary == "A short summary."
        assert len(await store.tags.list_for_item(item.id)) == 3

    @pytest.mark.asyncio
    async def test_embedding_store_failure_is_surfaced(self, client, store, embeddings, completions):
        _seed_conversation(client)
        client.fail("embeddings", "delete")

        result = await _indexer(store, embeddings, completions).index_source("conv-1")

        assert result.success and result.created
        assert result.error == "Clearing previous chunks failed: embeddings delete unavailable"

    @pytest.mark.asyncio
    async def test_second_run_skips_indexed(self, store, embeddings, completions):
        docs = {"a": SourceDocument(id="a", content="Some text.", item_type="conversation")}
        indexer = _indexer(store, embeddings, completions, source=StaticSource(docs, ["a"]))
        await indexer.index_all_sources()

        batch = await indexer.index_all_sources()

        assert (batch.indexed, batch.failed, batch.errors) == (0, 0, [])

    @pytest.mark.asyncio
    async def test_run_has_correlation_id(self, store, embeddings, completions):
        docs = {
            "a": SourceDocument(id="a", content="One.", item_type="conversation"),
            "b": SourceDocument(id="b", content="Two.", item_type="conversation"),
        }
        source = StaticSource(docs, ["a", "b"])

        await _indexer(store, embeddings, completions, source=source).index_all_sources()

        assert source.correlation_ids[0].startswith("index-")
        assert len(set(source.correlation_ids)) == 1
        assert get_correlation_id() is None
