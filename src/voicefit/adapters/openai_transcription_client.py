"""OpenAI audio transcription client."""

import logging
from dataclasses import dataclass

from openai import APIError, AsyncOpenAI

from voicefit.domain.errors import TranscriptionUnavailable
from voicefit.services.transcription import TranscriptionClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAITranscriptionClient(TranscriptionClient):
    """Transcription client backed by the OpenAI audio API."""

    client: AsyncOpenAI
    model: str = "gpt-4o-transcribe"

    async def transcribe(self, audio: bytes, filename: str) -> str:
        """Return the plain-text transcript for ``audio``."""
        try:
            transcription = await self.client.audio.transcriptions.create(
                file=(filename, audio),
                model=self.model,
                response_format="text",
            )
        except APIError as exc:
            _logger.warning("OpenAI transcription failed: %s", exc)
            raise TranscriptionUnavailable from exc
        if isinstance(transcription, str):
            return transcription
        return getattr(transcription, "text", "") or ""
