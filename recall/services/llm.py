"""Completion service backed by Claude, used for summaries and tag suggestions."""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Protocol

from anthropic import AsyncAnthropic

from recall.core.config import settings
from recall.core.logging_utils import log_llm_usage
from recall.shared.errors import CompletionServiceError

logger = logging.getLogger("Recall.Services.LLM")


class CompletionService(Protocol):
    """Single-shot text completion: instruction + message -> text."""

    async def complete(self, system_instruction: str, user_message: str) -> str:
        ...


class ClaudeCompletionService:
    """Ask Claude for one complete (non-streamed) answer, trying fallback models in order."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncAnthropic] = None,
        max_tokens: int = 1024,
    ) -> None:
        self.client = client or AsyncAnthropic(api_key=api_key or settings.ANTHROPIC_API_KEY)
        self.max_tokens = max_tokens

        primary_model = model or settings.CLAUDE_MODEL_PRIMARY
        fallback_models: List[str] = []
        for candidate in settings.CLAUDE_MODEL_OPTIONS:
            if candidate and candidate not in fallback_models and candidate != primary_model:
                fallback_models.append(candidate)

        self.model_candidates = [primary_model] + fallback_models

        logger.info(
            "Claude completion service initialized with models: %s",
            ", ".join(self.model_candidates),
        )

    async def complete(self, system_instruction: str, user_message: str) -> str:
        last_error: Optional[Exception] = None

        for model_name in self.model_candidates:
            try:
                return await self._invoke_model(system_instruction, user_message, model_name)
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Model %s failed: %s", model_name, exc)
                last_error = exc

        raise CompletionServiceError(
            f"All Claude models failed: {last_error}",
            details={"models": self.model_candidates},
        )

    async def _invoke_model(self, system_instruction: str, user_message: str, model_name: str) -> str:
        """Send one request to Claude and return the stripped text output."""
        started = time.monotonic()
        response = await self.client.messages.create(
            model=model_name,
            max_tokens=self.max_tokens,
            system=system_instruction,
            messages=[{"role": "user", "content": user_message}],
        )

        if not response.content:
            raise ValueError(f"Model {model_name} returned empty content")

        usage = getattr(response, "usage", None)
        if usage is not None:
            log_llm_usage(
                model=model_name,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                duration_ms=int((time.monotonic() - started) * 1000),
                purpose="knowledge",
            )

        block = response.content[0]
        result_text = block.text if hasattr(block, "text") else str(block)
        return result_text.strip()
