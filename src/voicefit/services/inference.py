"""Inference service boundary and the shared output parsing pipeline."""

import json
import logging
import re
from typing import Protocol

from pydantic import BaseModel

from voicefit.domain.errors import MalformedOutput, SchemaViolation
from voicefit.domain.inference import (
    InferenceResponse,
    OutputSchema,
    ToolDefinition,
    Turn,
)
from voicefit.services.schema_validation import (
    SchemaKind,
    ValidationFailure,
    validate,
)

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*")

_logger = logging.getLogger(__name__)


class InferenceClient(Protocol):
    """Interface for a single LLM completion call."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        system: str | None,
        turns: list[Turn],
        schema: OutputSchema | None = None,
        tools: list[ToolDefinition] | None = None,
    ) -> InferenceResponse:
        """Return the model's text and any tool calls it requested."""


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapped around model output."""
    return _FENCE_PATTERN.sub("", text).strip()


def parse_json_output(text: str | None, empty_message: str | None = None) -> object:
    """Parse model text as JSON after removing markdown fences."""
    if not text or not text.strip():
        raise MalformedOutput(empty_message)
    try:
        return json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        _logger.warning("Model output is not valid JSON: %s", exc)
        raise MalformedOutput from exc


def parse_structured(
    text: str | None, kind: SchemaKind, empty_message: str | None = None
) -> BaseModel:
    """Run the strip-fences, parse, validate pipeline for ``kind``."""
    result = validate(parse_json_output(text, empty_message), kind)
    if isinstance(result, ValidationFailure):
        _logger.warning(
            "Model output failed %s validation: %s",
            kind.value,
            "; ".join(str(violation) for violation in result.violations),
        )
        raise SchemaViolation(result.violations)
    return result.value
