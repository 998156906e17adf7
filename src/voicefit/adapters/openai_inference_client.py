"""OpenAI Responses API client for structured interpretation."""

import json
import logging
from dataclasses import dataclass

import httpx
from openai import APIError, AsyncOpenAI

from voicefit.domain.errors import InferenceUnavailable, MalformedOutput
from voicefit.domain.inference import (
    InferenceResponse,
    OutputSchema,
    ToolCallRequest,
    ToolCallTurn,
    ToolDefinition,
    ToolResultTurn,
    Turn,
    UserTurn,
)
from voicefit.services.inference import InferenceClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIInferenceClient(InferenceClient):
    """Inference client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    store: bool = False

    @classmethod
    def create(
        cls, api_key: str, timeout_seconds: float = 60.0, store: bool = False
    ) -> "OpenAIInferenceClient":
        """Create an OpenAI inference client."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, timeout=httpx.Timeout(timeout_seconds)
            ),
            store=store,
        )

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
        """Call OpenAI Responses API, optionally with tools and structured output."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [_to_input_item(turn) for turn in turns],
            "store": self.store,
        }
        if system:
            request_payload["instructions"] = system
        if schema is not None:
            request_payload["text"] = {
                "format": {
                    "type": "json_schema",
                    "name": schema.name,
                    "strict": True,
                    "schema": schema.schema,
                }
            }
        if tools:
            request_payload["tools"] = [_to_function_tool(tool) for tool in tools]
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except APIError as exc:
            _logger.warning("OpenAI request failed: %s", exc)
            raise InferenceUnavailable from exc

        tool_calls = [
            _to_tool_call(item)
            for item in response.output or []
            if getattr(item, "type", None) == "function_call"
        ]
        return InferenceResponse(
            text=response.output_text or None, tool_calls=tool_calls
        )

    async def close(self) -> None:
        await self.client.close()


def _to_input_item(turn: Turn) -> dict[str, object]:
    if isinstance(turn, UserTurn):
        return {"role": "user", "content": turn.text}
    if isinstance(turn, ToolCallTurn):
        return {
            "type": "function_call",
            "call_id": turn.call.call_id,
            "name": turn.call.name,
            "arguments": json.dumps(turn.call.arguments),
        }
    if isinstance(turn, ToolResultTurn):
        return {
            "type": "function_call_output",
            "call_id": turn.call_id,
            "output": turn.output,
        }
    raise TypeError(f"Unsupported turn type: {type(turn).__name__}")


def _to_function_tool(tool: ToolDefinition) -> dict[str, object]:
    return {
        "type": "function",
        "name": tool.name,
        "description": tool.description,
        "parameters": tool.parameters,
        "strict": False,
    }


def _to_tool_call(item: object) -> ToolCallRequest:
    raw_arguments = getattr(item, "arguments", None) or "{}"
    try:
        arguments = json.loads(raw_arguments)
    except json.JSONDecodeError as exc:
        raise MalformedOutput("Failed to read tool call arguments.") from exc
    if not isinstance(arguments, dict):
        raise MalformedOutput("Failed to read tool call arguments.")
    return ToolCallRequest(
        call_id=getattr(item, "call_id", ""),
        name=getattr(item, "name", ""),
        arguments=arguments,
    )
