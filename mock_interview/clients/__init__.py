# Engine-backed clients (pyttsx3, faster-whisper) are imported from their
# modules directly so the HTTP clients work without the devices extra.
from .base import JsonServiceClient
from .question_bank_client import QuestionBankClient
from .transcription_client import TranscriptionClient
from .scoring_client import ScoringClient
from .results_client import ResultsClient
from .console_speech_client import ConsoleSpeechClient


__all__ = [
    'JsonServiceClient',
    'QuestionBankClient',
    'TranscriptionClient',
    'ScoringClient',
    'ResultsClient',
    'ConsoleSpeechClient',
]
