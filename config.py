"""
AI Mock Interview - Configuration

Settings for the interview session: collaborator endpoints, speech and
capture devices, local cache, and the interviewer's spoken lines.
Every value can be overridden through environment variables or a .env file.
"""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from loguru import logger

from mock_interview.utils.logger import setup_logging
load_dotenv()


class ServiceConfig(BaseSettings):
    """Collaborator service endpoints"""

    api_host: str = Field("http://localhost:3000", description="Host serving the question bank, scoring and results APIs")
    transcription_url: str = Field("http://localhost:8000/api/transcribe/audio")

    # None means no timeout: a hung collaborator stalls the current step
    request_timeout: Optional[float] = Field(None)
    results_limit: int = Field(10)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator("api_host", "transcription_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return str(v).rstrip("/")


class SpeechConfig(BaseSettings):
    """Speech synthesis and transcription settings"""

    # TTS
    tts_backend: str = Field("pyttsx3")  # pyttsx3, console
    tts_driver: Optional[str] = Field(None)  # e.g. nsss, sapi5, espeak
    tts_rate: int = Field(180)
    tts_volume: float = Field(1.0)

    # Transcription
    transcription_backend: str = Field("remote")  # remote, whisper
    whisper_model: str = Field("base.en")
    whisper_device: str = Field("cpu")
    whisper_compute_type: str = Field("int8")
    whisper_language: str = Field("en")
    models_dir: Path = Field(Path("./models"))

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator("tts_backend", mode="before")
    @classmethod
    def valid_tts_backend(cls, v: str) -> str:
        if v not in ("pyttsx3", "console"):
            raise ValueError("TTS backend must be 'pyttsx3' or 'console'")
        return v

    @field_validator("transcription_backend", mode="before")
    @classmethod
    def valid_transcription_backend(cls, v: str) -> str:
        if v not in ("remote", "whisper"):
            raise ValueError("Transcription backend must be 'remote' or 'whisper'")
        return v

    @field_validator("tts_volume", mode="before")
    @classmethod
    def clamp_volume(cls, v: float) -> float:
        return max(0.0, min(1.0, float(v)))


class CaptureConfig(BaseSettings):
    """Camera and microphone settings"""

    # Camera
    camera_index: int = Field(0)
    video_width: int = Field(640)
    video_height: int = Field(480)

    # Microphone
    sample_rate: int = Field(16000)
    channels: int = Field(1)
    chunk_size: int = Field(1024)
    input_device_index: Optional[int] = Field(None)

    # RMS below this level is logged as a silent recording
    silence_threshold: int = Field(500)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator("sample_rate", mode="before")
    @classmethod
    def valid_sample_rate(cls, v: int) -> int:
        if int(v) not in [8000, 16000, 22050, 44100, 48000]:
            raise ValueError("Invalid sample rate")
        return int(v)


class ApplicationConfig(BaseSettings):
    """Application-wide settings"""

    base_dir: Path = Path(__file__).parent
    cache_dir: Path = Field(Path("./data/cache"))

    log_level: str = Field("INFO")

    # None keeps the last analysis until the next session overwrites it
    analysis_ttl_seconds: Optional[int] = Field(None)

    # Forces DEBUG logging whatever log_level says
    debug: bool = Field(False)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator("cache_dir", mode="before")
    @classmethod
    def create_dirs(cls, v: Path) -> Path:
        Path(v).mkdir(parents=True, exist_ok=True)
        return Path(v)

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level


class InterviewConfig(BaseSettings):
    """Interviewer lines and turn pacing"""

    welcome_template: str = (
        "Hello {name}! Welcome to your {position} interview. "
        "I'll be asking you {count} questions. "
        "Please speak clearly and use the record button to capture your responses. "
        "Let's begin with the first question."
    )
    question_template: str = "Question {number}: {text}"
    submit_transition: str = "Thank you for your response. Let's move to the next question."
    skip_transition: str = "Moving to the next question."
    closing_message: str = (
        "Thank you for completing the interview. Your responses are being analyzed. "
        "Please wait a moment for your results."
    )
    analyzed_message: str = (
        "Your interview has been analyzed successfully. "
        "Click 'View Results' to see your detailed feedback and score."
    )
    recorded_message: str = "Interview completed successfully. Your responses have been recorded."

    # Pause between a transition line and the next question (seconds)
    transition_pause: float = Field(1.0)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


class Config:
    """Singleton configuration object"""

    _instance: Optional["Config"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized") and self._initialized:
            return

        self.services = ServiceConfig()
        self.speech = SpeechConfig()
        self.capture = CaptureConfig()
        self.app = ApplicationConfig()
        self.interview = InterviewConfig()

        setup_logging(log_level=self.app.effective_log_level, base_dir=self.app.base_dir)

        self._initialized = True

    def get_summary(self) -> dict:
        """Return a printable summary of the active settings"""
        return {
            "services": {
                "api_host": self.services.api_host,
                "transcription": (
                    self.services.transcription_url
                    if self.speech.transcription_backend == "remote"
                    else f"faster-whisper {self.speech.whisper_model}"
                ),
                "timeout": self.services.request_timeout or "none",
            },
            "speech": {
                "tts": self.speech.tts_backend,
                "rate": self.speech.tts_rate,
            },
            "capture": {
                "camera": f"#{self.capture.camera_index} {self.capture.video_width}x{self.capture.video_height}",
                "sample_rate": self.capture.sample_rate,
                "channels": self.capture.channels,
            },
            "cache": {
                "dir": str(self.app.cache_dir),
                "analysis_ttl": self.app.analysis_ttl_seconds or "until overwritten",
            },
        }


# Global config instance
config = Config()
logger.debug("Configuration loaded")
