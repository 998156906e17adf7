"""Provider-neutral shapes exchanged with the inference service."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OutputSchema:
    """Named JSON Schema the model output must follow."""

    name: str
    schema: dict[str, object]


@dataclass(frozen=True)
class ToolDefinition:
    """A function the model may ask to call."""

    name: str
    description: str
    parameters: dict[str, object]


@dataclass(frozen=True)
class ToolCallRequest:
    """A tool invocation requested by the model."""

    call_id: str
    name: str
    arguments: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class UserTurn:
    """Plain user message."""

    text: str


@dataclass(frozen=True)
class ToolCallTurn:
    """Assistant turn that requested a tool."""

    call: ToolCallRequest


@dataclass(frozen=True)
class ToolResultTurn:
    """Tool output fed back to the model."""

    call_id: str
    output: str


Turn = UserTurn | ToolCallTurn | ToolResultTurn


@dataclass(frozen=True)
class InferenceResponse:
    """Model reply: final text, tool calls, or both."""

    text: str | None
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
