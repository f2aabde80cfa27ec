"""
Chunking of item content into retrievable units.

The goal of chunking is to:
1. Keep chunks small enough for good retrieval precision (~500 tokens)
2. Preserve semantic boundaries (paragraphs first, then sentences)
3. Avoid tiny chunks whose embeddings dilute retrieval quality
"""

import logging
import re
from typing import List, Optional

from recall.core.config import DEFAULT_KNOWLEDGE_SETTINGS, KnowledgeSettings

logger = logging.getLogger("Recall.Knowledge.Chunker")

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")


def chunk_text(text: str, settings: Optional[KnowledgeSettings] = None) -> List[str]:
    """
    Split text into chunks by paragraphs, then by sentences.

    Strategy:
    1. Paragraphs up to the target size become chunks; short ones are
       folded into the previous chunk (joined by a blank line).
    2. Oversized paragraphs are split at sentence ends and packed
       greedily up to the target size.
    3. No chunk under the minimum size survives on its own unless the
       text produced only one chunk; its text is folded into a neighbour.

    Returns:
        Ordered list of non-empty chunks; empty for blank input
    """
    settings = settings or DEFAULT_KNOWLEDGE_SETTINGS
    target = settings.target_chunk_chars
    minimum = settings.min_chunk_chars

    trimmed = text.strip()
    if not trimmed:
        return []

    chunks: List[str] = []
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(trimmed) if p.strip()]

    for para in paragraphs:
        if len(para) <= target:
            if len(para) >= minimum or not chunks:
                chunks.append(para)
            else:
                chunks[-1] = chunks[-1] + "\n\n" + para
            continue

        # Wall of text: pack sentences up to the target size
        sentences = [s for s in _SENTENCE_BREAK.split(para) if s.strip()]
        current = ""
        for sentence in sentences:
            if len(current) + len(sentence) + 1 <= target:
                current = f"{current} {sentence}" if current else sentence
            else:
                if current:
                    chunks.append(current)
                current = sentence
        if current:
            chunks.append(current)

    return _fold_undersized(chunks, minimum)


def _fold_undersized(chunks: List[str], minimum: int) -> List[str]:
    """
    Remove chunks under the minimum size without losing their text.

    An undersized chunk is appended to the chunk before it; leading
    undersized chunks are carried into the next chunk instead.
    """
    if len(chunks) <= 1:
        return chunks

    folded: List[str] = []
    pending = ""
    for chunk in chunks:
        if pending:
            chunk = pending + "\n\n" + chunk
            pending = ""
        if len(chunk) >= minimum:
            folded.append(chunk)
        elif folded:
            folded[-1] = folded[-1] + "\n\n" + chunk
        else:
            pending = chunk

    if pending:
        folded.append(pending)

    if len(folded) < len(chunks):
        logger.debug(f"Folded {len(chunks) - len(folded)} undersized chunks into neighbours")
    return folded
