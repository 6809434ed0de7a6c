"""Embedding and text-generation capabilities used by the evaluation pipeline."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, List, Optional, Protocol, TypeVar, runtime_checkable

from ...platform.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProviderError(Exception):
    """Base error for embedding/generation provider failures."""


class GenerationError(ProviderError):
    """The generation provider could not produce a response."""


@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.7
    max_output_tokens: int = 1024
    # "json" asks the backend for JSON-constrained output when it supports it.
    response_format: Optional[str] = None


DETERMINISTIC = GenerationOptions(temperature=0.0, max_output_tokens=16)


@runtime_checkable
class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> List[float]:
        """Embedding for ``text``; an empty list when the provider fails."""
        ...


@runtime_checkable
class GenerationProvider(Protocol):
    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Generated text; raises GenerationError on failure."""
        ...


async def with_timeout(call: Awaitable[T], timeout_seconds: float, *, label: str) -> T:
    """Await ``call``, converting a timeout into a GenerationError."""
    try:
        return await asyncio.wait_for(call, timeout=timeout_seconds)
    except asyncio.TimeoutError as exc:
        logger.warning("Provider call timed out (call=%s, timeout=%.1fs)", label, timeout_seconds)
        raise GenerationError(f"{label} timed out after {timeout_seconds:.1f}s") from exc


def build_embedding_provider(config: Settings | None = None) -> EmbeddingProvider:
    from .ollama.service import OllamaProvider

    config = config or default_settings
    return OllamaProvider.from_settings(config)


def build_generation_provider(config: Settings | None = None) -> GenerationProvider:
    config = config or default_settings
    backend = config.resolved_generation_backend
    if backend == "anthropic":
        from .claude.service import ClaudeGenerationProvider

        return ClaudeGenerationProvider.from_settings(config)

    from .ollama.service import OllamaProvider

    return OllamaProvider.from_settings(config)
