"""Story generator — turns one GenerationRequest into one GenerationResult.

Flow:
  1. Resolve the requested length to a target word-count range.
  2. Render the story prompt (style falls back to "fictional").
  3. Call the LLM with the prompt and the output schema.
  4. Validate the reply; nothing usable → GenerationFailed.
  5. Return the validated result as-is.

There is no retry: one failed attempt is final. Provider errors propagate
unchanged.
"""

from __future__ import annotations

import asyncio
import logging

from storygen.llm import StructuredLLM
from storygen.models import (
    LENGTH_POLICY,
    OUTPUT_SCHEMA_NAME,
    GenerationRequest,
    GenerationResult,
    ResultValidationError,
    output_schema,
    validate_result,
)
from storygen.prompts import STORY_PROMPT, render_prompt

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "fictional"


class GenerationFailed(RuntimeError):
    """Raised when the model returns no output or output that fails validation."""

    def __init__(self, message: str = "Failed to generate story") -> None:
        super().__init__(message)


class GenerationCancelled(GenerationFailed):
    """Raised when the generation deadline elapses before the model answers."""

    def __init__(self, message: str = "Story generation timed out") -> None:
        super().__init__(message)


def word_count_range(length: str) -> str:
    return LENGTH_POLICY[length]


def build_prompt(request: GenerationRequest) -> str:
    return render_prompt(STORY_PROMPT, {
        "style": request.style or DEFAULT_STYLE,
        "topic": request.topic,
        "word_count": word_count_range(request.length),
    })


class StoryGenerator:
    """Runs single story generations against an injected LLM.

    Args:
        llm:      Structured-output LLM callable.
        timeout:  Seconds to wait for the model; None waits indefinitely.
    """

    def __init__(self, llm: StructuredLLM, timeout: float | None = None) -> None:
        self._llm = llm
        self._timeout = timeout

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        prompt = build_prompt(request)
        logger.debug("generating story topic=%r length=%s prompt_len=%d",
                     request.topic, request.length, len(prompt))

        call = self._llm(prompt, output_schema(), OUTPUT_SCHEMA_NAME)
        if self._timeout is None:
            output = await call
        else:
            try:
                output = await asyncio.wait_for(call, self._timeout)
            except asyncio.TimeoutError as e:
                logger.warning("story generation exceeded %ss", self._timeout)
                raise GenerationCancelled() from e

        try:
            return validate_result(output)
        except ResultValidationError as e:
            logger.warning("rejected model output: %s", e)
            raise GenerationFailed() from e
