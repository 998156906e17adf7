"""Intent classification for free-form entries."""

from dataclasses import dataclass

from voicefit.domain.errors import InvalidTranscript
from voicefit.domain.inference import UserTurn
from voicefit.domain.interpretation import IntentClassification
from voicefit.services.inference import InferenceClient, parse_structured
from voicefit.services.prompts import build_classifier_prompt
from voicefit.services.schema_validation import OUTPUT_SCHEMAS, SchemaKind


@dataclass
class IntentClassifier:
    """Routes a transcript to meal, workout set, weight, steps or question."""

    client: InferenceClient
    model: str
    reasoning_effort: str | None = None

    async def classify(self, transcript: str) -> IntentClassification:
        """Classify ``transcript`` and extract weight or steps when present."""
        if not transcript or not transcript.strip():
            raise InvalidTranscript
        prompt = build_classifier_prompt(transcript.strip())
        response = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            system=prompt.system,
            turns=[UserTurn(prompt.user)],
            schema=OUTPUT_SCHEMAS[SchemaKind.INTENT],
        )
        return parse_structured(
            response.text,
            SchemaKind.INTENT,
            "Failed to classify entry. Please try again.",
        )
