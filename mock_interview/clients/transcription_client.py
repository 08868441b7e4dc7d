"""
Remote transcription client.

Uploads one recorded answer to the transcription service and returns the text.
"""

import asyncio
import re

import aiohttp
from loguru import logger

from config import config
from mock_interview.clients.base import JsonServiceClient
from mock_interview.utils.error_handlers import TranscriptionError


def clean_transcript(text: str) -> str:
    """Collapse whitespace and tidy punctuation spacing."""
    if not text:
        return ""
    text = re.sub(r'\s+', ' ', text.strip())
    return re.sub(r' ([,.?!])', r'\1', text)


class TranscriptionClient(JsonServiceClient):

    service_name = "Transcription service"

    def __init__(self, url: str = None, timeout: float = None):
        super().__init__(base_url=url or config.services.transcription_url, timeout=timeout)
        self.total_audio_bytes = 0

    async def transcribe_audio(self, audio_data: bytes) -> str:
        """
        Transcribe a recorded answer.

        Args:
            audio_data: Encoded audio (WAV from the microphone backend)

        Returns:
            Transcript text, possibly empty when no speech was recognised

        Raises:
            TranscriptionError: the request failed or the reply was unusable
        """
        if not audio_data:
            raise TranscriptionError("No audio to transcribe")

        await self._ensure_session()
        form = aiohttp.FormData()
        form.add_field("audio", audio_data, filename="recording.wav", content_type="audio/wav")

        logger.debug(f"Uploading {len(audio_data) / 1024:.1f}KB for transcription")
        try:
            async with self.session.post(self.base_url, data=form) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise TranscriptionError(f"Transcription failed: {response.status} - {error_text[:200]}")
                body = await self._read_json(response)
        except (aiohttp.ClientError, ValueError, asyncio.TimeoutError) as e:
            logger.error(f"Transcription request failed: {e}")
            raise TranscriptionError(f"Transcription failed: {e}") from e

        if not isinstance(body, dict) or "transcription" not in body:
            raise TranscriptionError("Transcription failed: reply has no 'transcription' field")

        self.total_audio_bytes += len(audio_data)
        transcript = clean_transcript(body.get("transcription") or "")
        logger.info(f"Transcription received: {len(transcript)} characters")
        return transcript

    def get_statistics(self) -> dict:
        return {
            "total_requests": self.total_requests,
            "total_audio": f"{self.total_audio_bytes / 1024:.1f}KB",
            "url": self.base_url,
        }
