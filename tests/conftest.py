import asyncio

import pytest

from mock_interview.orchestrator.capture import CaptureManager
from mock_interview.orchestrator.orchestrator import InterviewOrchestrator
from mock_interview.orchestrator.reporter import SessionReporter
from mock_interview.orchestrator.result_cache import ResultCache
from mock_interview.orchestrator.schema import QuestionSet, ScoringResult
from mock_interview.orchestrator.speech import SpeechChannel
from mock_interview.utils.error_handlers import (
    DeviceError, QuestionBankError, ScoringError, TranscriptionError
)


WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt "


async def until(predicate, rounds=50):
    """Yield to the event loop until ``predicate()`` holds."""
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


# --- Devices ---

class FakeStream:
    def __init__(self):
        self.stopped = False

    def stop(self):
        self.stopped = True


class FakeCamera:
    def __init__(self, fail=False):
        self.fail = fail
        self.streams = []

    async def open(self):
        if self.fail:
            raise DeviceError("Permission denied")
        stream = FakeStream()
        self.streams.append(stream)
        return stream


class FakeTrack:
    def __init__(self, payload):
        self.payload = payload
        self.stop_calls = 0

    async def stop(self):
        self.stop_calls += 1
        return self.payload


class FakeMicrophone:
    def __init__(self, payload=WAV_BYTES, fail=False, error=None):
        self.payload = payload
        self.fail = fail
        self.error = error
        self.tracks = []

    async def open(self):
        if self.error is not None:
            raise self.error
        if self.fail:
            raise DeviceError("No input device")
        track = FakeTrack(self.payload)
        self.tracks.append(track)
        return track


class FakeDisplay:
    def __init__(self):
        self.stream = None
        self.attached = []

    def attach(self, stream):
        self.stream = stream
        self.attached.append(stream)

    def detach(self):
        self.stream = None


# --- Speech ---

class FakeSynthesizer:
    """Records what was said. With ``hold()`` every utterance waits for ``release()``."""

    def __init__(self, fail=False):
        self.fail = fail
        self.started = []
        self.completed = []
        self.stop_calls = 0
        self._gate = None

    def hold(self):
        self._gate = asyncio.Event()

    def release(self):
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    async def say(self, text):
        self.started.append(text)
        if self.fail:
            raise RuntimeError("audio output unavailable")
        if self._gate is not None:
            await self._gate.wait()
        self.completed.append(text)
        return True

    def stop_playback(self):
        self.stop_calls += 1


# --- Collaborators ---

class FakeQuestionBank:
    def __init__(self, question_set=None, error=None):
        self.question_set = question_set
        self.error = error
        self.calls = 0

    async def fetch_questions(self, email):
        self.calls += 1
        if self.error:
            raise QuestionBankError(self.error)
        return self.question_set


class FakeTranscriber:
    def __init__(self, answers=None, fail=False):
        self.answers = list(answers or [])
        self.fail = fail
        self.payloads = []
        self._gate = None

    def hold(self):
        self._gate = asyncio.Event()

    def release(self):
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    async def transcribe_audio(self, audio_data):
        self.payloads.append(audio_data)
        if self._gate is not None:
            await self._gate.wait()
        if self.fail:
            raise TranscriptionError("Transcription failed: 500 - boom")
        return self.answers.pop(0) if self.answers else "An answer"


class FakeScoring:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.transcripts = []

    async def analyze(self, transcript):
        self.transcripts.append(transcript)
        if self.error is not None:
            raise self.error
        return self.result


# --- Data ---

@pytest.fixture
def question_payload():
    return {
        "questions": [
            {"id": 1, "question": "Tell me about your experience.", "category": "background", "difficulty": "easy"},
            {"id": 2, "question": "Describe a hard bug you fixed.", "category": "technical", "difficulty": "medium"},
            {"id": 3, "question": "Do you know Go?", "category": "technical", "difficulty": "hard"},
        ],
        "candidateName": "Sam",
        "position": "Backend Engineer",
        "experienceLevel": "mid",
        "totalDuration": 30,
    }


@pytest.fixture
def question_set(question_payload):
    return QuestionSet.model_validate(question_payload)


@pytest.fixture
def analysis_payload():
    return {
        "overallScore": 78,
        "technicalScore": 7.5,
        "communicationScore": 8,
        "recommendation": "Consider",
        "finalFeedback": "Solid answers with room to go deeper.",
        "detailedFeedback": {
            "strengths": ["Clear communication"],
            "weaknesses": ["Limited Go experience"],
            "technicalAnalysis": "Good fundamentals.",
            "communicationAnalysis": "Structured.",
            "culturalFit": "Good",
            "specificInsights": ["Mentions testing"],
        },
        "scoreBreakdown": {"problemSolving": 7, "clarity": 8.5},
        "nextSteps": "Technical round",
    }


@pytest.fixture
def scoring_result(analysis_payload):
    return ScoringResult.model_validate(
        {"detailedAnalysis": analysis_payload, "analysisId": 17, "savedAt": "2024-05-01T10:00:00Z"}
    )


@pytest.fixture
def cache(tmp_path):
    return ResultCache(tmp_path / "cache")


# --- Wiring ---

@pytest.fixture
def make_orchestrator(question_set, scoring_result, cache):
    """Build a turn controller around fakes; keyword arguments replace individual fakes."""

    def factory(**overrides):
        parts = {
            "camera": FakeCamera(),
            "microphone": FakeMicrophone(),
            "display": FakeDisplay(),
            "synthesizer": FakeSynthesizer(),
            "question_bank": FakeQuestionBank(question_set),
            "transcriber": FakeTranscriber(),
            "scoring": FakeScoring(result=scoring_result),
        }
        parts.update(overrides)

        capture = CaptureManager(parts["camera"], parts["microphone"], parts["display"])
        orchestrator = InterviewOrchestrator(
            email="sam@example.com",
            job_id=42,
            question_bank=parts["question_bank"],
            capture=capture,
            speech=SpeechChannel(parts["synthesizer"]),
            transcriber=parts["transcriber"],
            reporter=SessionReporter(parts["scoring"], cache),
            transition_pause=0,
        )
        orchestrator.fakes = parts
        return orchestrator

    return factory


@pytest.fixture
def scoring_error():
    return ScoringError("Failed to analyze interview: 500 - boom")
