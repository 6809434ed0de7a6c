"""
Shared dependencies. Provider instances are built once per process from settings.
"""

from functools import lru_cache

from .components.integrations.providers import (
    EmbeddingProvider,
    GenerationProvider,
    build_embedding_provider,
    build_generation_provider,
)


@lru_cache(maxsize=1)
def get_embedding_provider() -> EmbeddingProvider:
    return build_embedding_provider()


@lru_cache(maxsize=1)
def get_generation_provider() -> GenerationProvider:
    return build_generation_provider()


__all__ = ["get_embedding_provider", "get_generation_provider"]
