"""
Anthropic Claude generation provider.

Used when GENERATION_BACKEND=anthropic. Embeddings still come from Ollama;
Claude only serves the text-generation capability.
"""

from __future__ import annotations

import asyncio
import logging

from ....platform.config import Settings
from ..providers import GenerationError, GenerationOptions
from .model_fallback import fallback_chain, is_model_not_found_error

logger = logging.getLogger(__name__)

JSON_SYSTEM_PROMPT = "You are an expert technical interviewer. Respond ONLY with valid JSON, no markdown."
TEXT_SYSTEM_PROMPT = "You are an expert technical interviewer reviewing interview answers."


class ClaudeGenerationProvider:
    """Generation provider for the Anthropic Messages API."""

    def __init__(self, api_key: str, model: str):
        """
        Initialise the Claude provider.

        Args:
            api_key: Anthropic API key.
            model: Requested model; known aliases fall back within their family.
        """
        self.api_key = api_key
        self.model = model
        logger.info("ClaudeGenerationProvider initialised with model=%s", self.model)

    @classmethod
    def from_settings(cls, config: Settings) -> "ClaudeGenerationProvider":
        return cls(api_key=config.ANTHROPIC_API_KEY, model=config.resolved_claude_model)

    def _create_message(self, prompt: str, options: GenerationOptions) -> str:
        from anthropic import Anthropic

        client = Anthropic(api_key=self.api_key)
        system = JSON_SYSTEM_PROMPT if options.response_format == "json" else TEXT_SYSTEM_PROMPT

        last_model_error: Exception | None = None
        for candidate_model in fallback_chain(self.model):
            try:
                response = client.messages.create(
                    model=candidate_model,
                    max_tokens=options.max_output_tokens,
                    temperature=options.temperature,
                    system=system,
                    messages=[{"role": "user", "content": prompt}],
                )
            except Exception as exc:
                if is_model_not_found_error(exc):
                    last_model_error = exc
                    logger.warning("Claude model unavailable (model=%s): %s", candidate_model, exc)
                    continue
                raise
            if candidate_model != self.model:
                logger.warning(
                    "Fell back to Claude model=%s after primary model=%s was unavailable",
                    candidate_model,
                    self.model,
                )
            return response.content[0].text

        if last_model_error is not None:
            raise last_model_error
        raise RuntimeError("Claude call failed before receiving a response")

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        logger.info(
            "Sending generate request to Claude (model=%s, prompt_chars=%d, temperature=%.2f)",
            self.model,
            len(prompt),
            options.temperature,
        )
        try:
            return await asyncio.to_thread(self._create_message, prompt, options)
        except Exception as e:
            logger.error("Claude generate request failed: %s (type=%s)", e, type(e).__name__)
            raise GenerationError(f"Claude generate failed: {e}") from e
