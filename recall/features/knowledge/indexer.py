"""
Indexing service - turn a source document into a searchable knowledge item.

Per source document the flow is:
    unindexed -> summarizing -> embedding -> tagging -> indexed

Summary and tags are enhancements: when the completion service fails the
item is still created and indexed, and the failure is reported as a
warning. Embedding errors are reported on a successful result, since the
item exists and is already partially searchable.
"""

import logging
import re
from typing import List, Optional, Protocol

from recall.features.database.models import SourceDocument
from recall.features.knowledge.embedding import EmbeddingPipeline
from recall.features.knowledge.models import BatchIndexResult, IndexResult
from recall.services.llm import CompletionService
from recall.shared.constants import (
    MAX_AUTO_TAGS,
    MAX_TAG_LENGTH,
    SUMMARY_INPUT_CHARS,
    SUMMARY_INSTRUCTION,
    TAGS_INPUT_CHARS,
    TAGS_INSTRUCTION,
    TITLE_PREVIEW_CHARS,
)
from recall.shared.correlation import correlation_scope

logger = logging.getLogger("Recall.Knowledge.Indexer")


class DocumentSource(Protocol):
    """Where source documents come from (conversations, transcripts)."""

    label: str

    async def get_document(self, source_id: str) -> Optional[SourceDocument]:
        ...

    async def list_ids(self) -> List[str]:
        ...


def build_title(document: SourceDocument) -> str:
    """Source title, or a content preview ending in an ellipsis when cut."""
    if document.title:
        return document.title
    preview = document.content[:TITLE_PREVIEW_CHARS]
    return preview + "…" if len(document.content) > TITLE_PREVIEW_CHARS else preview


def parse_tags(response: str) -> List[str]:
    """
    Parse a comma-separated tag list from the model.

    "Finance, Q3 Planning, roadmap" -> ["finance", "q3-planning", "roadmap"]
    """
    tags = []
    for raw in response.split(","):
        name = re.sub(r"\s+", "-", raw.strip().lower())
        if name and len(name) <= MAX_TAG_LENGTH:
            tags.append(name)
    return tags[:MAX_AUTO_TAGS]


class KnowledgeIndexer:
    """Index documents from one source into the knowledge store."""

    def __init__(
        self,
        store,
        pipeline: EmbeddingPipeline,
        completions: CompletionService,
        source: DocumentSource,
    ):
        self.store = store
        self.pipeline = pipeline
        self.completions = completions
        self.source = source

    async def index_source(self, source_id: str) -> IndexResult:
        """
        Index one source document.

        Re-indexing is a no-op: if an item already exists for the source
        id, it is returned with ``created=False``.
        """
        try:
            existing = await self.store.items.get_by_source_id(source_id)
        except Exception as e:
            logger.error(f"Idempotency check failed for {source_id}: {e}")
            return IndexResult(success=False, error=str(e))

        if existing:
            logger.info(f"{self.source.label} {source_id} already indexed as {existing.id}, skipping")
            return IndexResult(success=True, item_id=existing.id, created=False)

        try:
            document = await self.source.get_document(source_id)
        except Exception as e:
            logger.error(f"Failed to load {self.source.label.lower()} {source_id}: {e}")
            return IndexResult(success=False, error=str(e))

        if document is None:
            logger.warning(f"{self.source.label} not found: {source_id}")
            return IndexResult(success=False, error=f"{self.source.label} not found")

        warnings: List[str] = []

        # Summarizing
        summary: Optional[str] = None
        try:
            summary = await self._summarize(document.content)
        except Exception as e:
            logger.warning(f"Summary failed for {source_id}, continuing without: {e}")
            warnings.append(f"Summary generation failed: {e}")

        try:
            item = await self.store.items.create(
                item_type=document.item_type,
                title=build_title(document),
                content=document.content,
                summary=summary,
                source_id=source_id,
            )
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            logger.error(f"Failed to create knowledge item for {source_id}: {message}")
            return IndexResult(success=False, error=message, warnings=warnings)

        # Embedding
        embed_result = await self.pipeline.embed_item(item.id, document.content)
        if embed_result.error:
            try:
                await self.store.items.update(item.id, summary=summary)
            except Exception as e:
                logger.warning(f"Could not re-save summary for {item.id}: {e}")

        # Tagging
        warnings.extend(await self._auto_tag(item.id, document.content))

        logger.info(
            "Indexed %s %s as %s: %s chunks, %s warnings",
            self.source.label.lower(),
            source_id,
            item.id,
            embed_result.chunk_count,
            len(warnings),
        )
        return IndexResult(
            success=True,
            item_id=item.id,
            error=embed_result.error,
            created=True,
            warnings=warnings,
        )

    async def index_all_sources(self) -> BatchIndexResult:
        """
        Index every source document, one at a time.

        Individual failures are counted and collected; the run never stops
        early. Already-indexed documents count as neither indexed nor failed.
        """
        with correlation_scope("index"):
            source_ids = await self.source.list_ids()
            logger.info(f"Indexing {len(source_ids)} {self.source.label.lower()}s")

            batch = BatchIndexResult()
            for source_id in source_ids:
                result = await self.index_source(source_id)
                if result.success and result.created:
                    batch.indexed += 1
                elif not result.success:
                    batch.failed += 1
                    if result.error:
                        batch.errors.append(f"{source_id}: {result.error}")

            logger.info(f"Batch indexing complete: indexed={batch.indexed}, failed={batch.failed}")
            return batch

    async def _summarize(self, content: str) -> Optional[str]:
        summary = await self.completions.complete(SUMMARY_INSTRUCTION, content[:SUMMARY_INPUT_CHARS])
        summary = summary.strip()
        return summary or None

    async def _auto_tag(self, item_id: str, content: str) -> List[str]:
        """Attach model-suggested tags. Returns warnings; never raises."""
        try:
            response = await self.completions.complete(TAGS_INSTRUCTION, content[:TAGS_INPUT_CHARS])
        except Exception as e:
            logger.warning(f"Tag suggestion failed for {item_id}: {e}")
            return [f"Tag generation failed: {e}"]

        warnings = []
        for name in parse_tags(response):
            try:
                tag = await self.store.tags.get_or_create(name, is_auto=True)
                await self.store.tags.add_to_item(item_id, tag.id)
            except Exception as e:
                logger.warning(f"Could not attach tag '{name}' to {item_id}: {e}")
                warnings.append(f"Tag '{name}' failed: {e}")
        return warnings
