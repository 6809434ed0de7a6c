"""Bounded, sequential retry of generation calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from ..integrations.providers import GenerationError, GenerationOptions, GenerationProvider, with_timeout
from .json_output import Parsed, ParseFailure, ParseResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryOutcome(Generic[T]):
    """Result of a retried generation: the value, or the last failure reason."""

    def __init__(self, value: Optional[T], attempts: int, last_error: str = ""):
        self.value = value
        self.attempts = attempts
        self.last_error = last_error

    @property
    def ok(self) -> bool:
        return self.value is not None


async def generate_with_retry(
    generator: GenerationProvider,
    prompt: str,
    options: GenerationOptions,
    parse: Callable[[str], ParseResult],
    *,
    max_retries: int = 2,
    delay_seconds: float = 0.0,
    timeout_seconds: float = 60.0,
    label: str = "generation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> RetryOutcome:
    """Send the same prompt up to ``1 + max_retries`` times until ``parse`` succeeds.

    Provider errors, timeouts, and parse/validation failures all consume one
    attempt. Attempts are sequential with a fixed delay between them.
    """
    attempts_allowed = 1 + max(0, int(max_retries))
    last_error = ""

    for attempt in range(1, attempts_allowed + 1):
        try:
            raw = await with_timeout(generator.generate(prompt, options), timeout_seconds, label=label)
        except GenerationError as e:
            last_error = str(e)
            logger.warning("%s attempt %d/%d failed: %s", label, attempt, attempts_allowed, e)
        else:
            result = parse(raw)
            if isinstance(result, Parsed):
                if attempt > 1:
                    logger.info("%s succeeded on attempt %d/%d", label, attempt, attempts_allowed)
                return RetryOutcome(result.data, attempt)
            last_error = result.reason if isinstance(result, ParseFailure) else "unparsed output"
            logger.warning(
                "%s attempt %d/%d returned unusable output: %s",
                label,
                attempt,
                attempts_allowed,
                result.reason,
            )

        if attempt < attempts_allowed and delay_seconds > 0:
            await sleep(delay_seconds)

    logger.warning("%s exhausted %d attempts (last_error=%s)", label, attempts_allowed, last_error)
    return RetryOutcome(None, attempts_allowed, last_error)
