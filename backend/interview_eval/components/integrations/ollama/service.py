"""
Ollama HTTP provider for embeddings and text generation.

Talks to the Ollama REST API directly:

    POST {host}/api/embed     {"model", "input"}                 -> {"embeddings": [[...]]}
    POST {host}/api/generate  {"model", "prompt", "stream": false,
                               "options": {...}, "format"?}      -> {"response": "..."}
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ....platform.config import Settings
from ..providers import GenerationError, GenerationOptions

logger = logging.getLogger(__name__)


class OllamaProvider:
    """Embedding + generation provider backed by a local Ollama server."""

    def __init__(
        self,
        host: str,
        model: str,
        embedding_model: str,
        timeout_seconds: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.host = host.rstrip("/")
        self.model = model
        self.embedding_model = embedding_model
        self.timeout_seconds = timeout_seconds
        # Injected in tests (httpx.MockTransport); None uses the network.
        self._transport = transport
        logger.info(
            "OllamaProvider initialised (host=%s, model=%s, embedding_model=%s)",
            self.host,
            self.model,
            self.embedding_model,
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "OllamaProvider":
        return cls(
            host=config.OLLAMA_HOST,
            model=config.OLLAMA_MODEL,
            embedding_model=config.OLLAMA_EMBEDDING_MODEL,
            timeout_seconds=config.PROVIDER_TIMEOUT_SECONDS,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.host,
            timeout=self.timeout_seconds,
            transport=self._transport,
        )

    async def embed(self, text: str) -> List[float]:
        """Embedding vector for ``text``; [] on any failure."""
        try:
            async with self._client() as client:
                response = await client.post(
                    "/api/embed",
                    json={"model": self.embedding_model, "input": text},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError, asyncio.TimeoutError) as e:
            logger.warning("Ollama embedding failed (model=%s): %s", self.embedding_model, e)
            return []

        embeddings = data.get("embeddings") if isinstance(data, dict) else None
        if not embeddings or not isinstance(embeddings[0], list):
            # Older servers answer /api/embeddings with a flat "embedding" field.
            single = data.get("embedding") if isinstance(data, dict) else None
            if isinstance(single, list):
                return [float(x) for x in single]
            logger.warning("Ollama embedding response had no vectors (model=%s)", self.embedding_model)
            return []
        try:
            return [float(x) for x in embeddings[0]]
        except (TypeError, ValueError):
            logger.warning("Ollama embedding response had non-numeric values (model=%s)", self.embedding_model)
            return []

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        payload: Dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": options.temperature,
                "num_predict": options.max_output_tokens,
            },
        }
        if options.response_format == "json":
            payload["format"] = "json"

        logger.info(
            "Sending generate request to Ollama (model=%s, prompt_chars=%d, temperature=%.2f)",
            self.model,
            len(prompt),
            options.temperature,
        )
        try:
            async with self._client() as client:
                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError as e:
            logger.error("Connection error to Ollama at %s: %s", self.host, e)
            raise GenerationError(f"Could not connect to Ollama at {self.host}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Ollama generate request failed: %s", e)
            raise GenerationError(f"Ollama generate failed: {e}") from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise GenerationError("Ollama generate response is missing 'response'")
        return text
