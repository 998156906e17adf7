"""Speech-to-text for recorded entries."""

from dataclasses import dataclass
from typing import Protocol

from voicefit.domain.errors import InvalidAudio, TranscriptionUnavailable

MAX_AUDIO_BYTES = 25 * 1024 * 1024


class TranscriptionClient(Protocol):
    """Interface for a speech-to-text provider."""

    async def transcribe(self, audio: bytes, filename: str) -> str:
        """Return the raw transcript for ``audio``."""


@dataclass
class TranscriptionService:
    """Validates uploads before handing them to the transcription client."""

    client: TranscriptionClient
    max_bytes: int = MAX_AUDIO_BYTES

    async def transcribe(self, audio: bytes, filename: str = "audio.webm") -> str:
        if not audio:
            raise InvalidAudio
        if len(audio) > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise InvalidAudio(
                f"Audio file too large. Maximum size is {limit_mb}MB."
            )
        transcript = (await self.client.transcribe(audio, filename)).strip()
        if not transcript:
            raise TranscriptionUnavailable("No speech detected. Please try again.")
        return transcript
