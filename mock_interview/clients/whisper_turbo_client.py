"""
faster-whisper client - local speech-to-text

Drop-in replacement for the remote transcription service when the machine
can run the model itself.
"""

import asyncio
import io

from faster_whisper import WhisperModel
from loguru import logger

from config import config
from mock_interview.clients.transcription_client import clean_transcript
from mock_interview.utils.error_handlers import TranscriptionError


class WhisperTurboClient:
    """Transcribes recorded answers locally with faster-whisper."""

    def __init__(self):
        self.model_size = config.speech.whisper_model
        self.device = config.speech.whisper_device
        self.compute_type = config.speech.whisper_compute_type
        self.language = config.speech.whisper_language

        logger.info(f"Loading Whisper model: {self.model_size}")
        self.model = WhisperModel(
            self.model_size,
            device=self.device,
            compute_type=self.compute_type,
            download_root=str(config.speech.models_dir / "whisper")
        )

        self.total_transcriptions = 0
        self.total_audio_duration = 0.0

        logger.info(f"Whisper client ready. Model: {self.model_size}")

    async def transcribe_audio(self, audio_data: bytes) -> str:
        """
        Transcribe an encoded audio payload.

        Raises:
            TranscriptionError: decoding or inference failed
        """
        if not audio_data:
            raise TranscriptionError("No audio to transcribe")

        def transcribe():
            segments, info = self.model.transcribe(
                io.BytesIO(audio_data),
                language=self.language,
                task="transcribe",
                temperature=0.0,
                vad_filter=True,
                vad_parameters=dict(
                    min_silence_duration_ms=500,
                    speech_pad_ms=200
                )
            )
            # segments is lazy; joining drives the decode
            return " ".join(segment.text.strip() for segment in segments), info

        try:
            loop = asyncio.get_running_loop()
            transcript, info = await loop.run_in_executor(None, transcribe)
        except Exception as e:
            logger.error(f"Whisper transcription error: {e}")
            raise TranscriptionError(f"Transcription failed: {e}") from e

        self.total_transcriptions += 1
        self.total_audio_duration += info.duration

        transcript = clean_transcript(transcript)
        logger.info(f"Transcribed {info.duration:.1f}s of audio into {len(transcript)} characters")
        return transcript

    def get_statistics(self) -> dict:
        return {
            "total_transcriptions": self.total_transcriptions,
            "total_audio_duration": f"{self.total_audio_duration:.1f} seconds",
            "model": self.model_size,
            "device": self.device
        }

    async def close(self):
        """Nothing to release; present for interface parity with the remote client"""
