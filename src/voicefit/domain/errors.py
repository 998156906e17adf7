"""Typed failures raised by the interpretation pipeline."""

from dataclasses import dataclass


class InterpretationError(Exception):
    """Base error for every terminal interpretation failure."""

    default_message = "Failed to interpret entry. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidTranscript(InterpretationError):
    """Transcript was empty or whitespace only."""

    default_message = "Transcript is required."


class InvalidAudio(InterpretationError):
    """Uploaded audio was missing or too large."""

    default_message = "No audio file provided."


class InvalidTimezone(InterpretationError):
    """Timezone is not a known IANA name."""

    default_message = "Unknown timezone."


class TranscriptionUnavailable(InterpretationError):
    """Speech-to-text failed or produced no text."""

    default_message = "Failed to transcribe audio. Please try again."


class InferenceUnavailable(InterpretationError):
    """The inference service call itself failed."""

    default_message = "The assistant is unavailable right now. Please try again."


class MalformedOutput(InterpretationError):
    """Inference output was missing or not parseable JSON."""

    default_message = "Failed to parse interpretation. Please try again."


@dataclass(frozen=True)
class FieldViolation:
    """A single field-level validation problem."""

    field: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"


class SchemaViolation(InterpretationError):
    """Parsed output does not satisfy its contract."""

    default_message = "Invalid interpretation format. Please try again."

    def __init__(
        self, violations: list[FieldViolation], message: str | None = None
    ) -> None:
        self.violations = violations
        super().__init__(message)


class ExtractionIncomplete(InterpretationError):
    """Intent was recognised but its value could not be extracted."""

    default_message = "Unable to extract a value. Please try again."


class ToolExecutionFailure(InterpretationError):
    """A tool requested by the model could not be executed."""

    default_message = "Failed to look up previous meals. Please try again."


class RecordStoreUnavailable(InterpretationError):
    """Historical records could not be read."""

    default_message = "Couldn't load your recent history. Please try again."


class UnsupportedIntent(InterpretationError):
    """Classifier produced an intent the orchestrator cannot route."""

    default_message = "Unsupported entry type. Please try again."
