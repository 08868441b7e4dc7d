"""
Interview session state.

One explicit value holds everything the turn controller mutates: the loaded
questions, the current index, the append-only responses, and the flags that
gate which user actions are available. Nothing here performs I/O.
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from mock_interview.orchestrator.schema import (
    CandidateInfo, InterviewTranscript, Question, Response
)


class TurnState(str, Enum):
    """Interview turn states"""
    IDLE = "idle"
    SETUP = "setup"
    SPEAKING = "speaking"
    AWAITING_RECORDING = "awaiting_recording"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    AWAITING_SUBMIT = "awaiting_submit"
    FINISHING = "finishing"
    COMPLETED = "completed"


# States in which the candidate may skip the current question
SKIPPABLE_STATES = frozenset({
    TurnState.SPEAKING,
    TurnState.AWAITING_RECORDING,
    TurnState.AWAITING_SUBMIT,
})

# States from which a new recording may begin
RECORDABLE_STATES = frozenset({
    TurnState.AWAITING_RECORDING,
    TurnState.AWAITING_SUBMIT,
})


class SessionState(BaseModel):
    """
    Full state of one interview session.

    Invariant: once ``completed`` is set, there is exactly one response per
    question, in question order, and the index points at the last question.
    """
    email: Optional[str] = None
    job_id: Optional[Union[int, str]] = None
    candidate_info: CandidateInfo = Field(default_factory=CandidateInfo)
    questions: List[Question] = Field(default_factory=list)

    turn_state: TurnState = Field(default=TurnState.IDLE)
    current_question_index: int = Field(default=0)
    responses: List[Response] = Field(default_factory=list)
    current_transcript: str = Field(default="")

    started: bool = False
    completed: bool = False
    speech_done: bool = True

    # Last user-visible message
    error: Optional[str] = None

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_question_index >= len(self.questions) - 1

    @property
    def current_answered(self) -> bool:
        return len(self.responses) > self.current_question_index

    def to_transcript(self) -> InterviewTranscript:
        return InterviewTranscript(
            email=self.email,
            job_id=self.job_id,
            candidate_info=self.candidate_info,
            questions=list(self.questions),
            responses=list(self.responses),
        )

    def check_invariants(self) -> None:
        """Raise AssertionError if the completed-session invariants do not hold."""
        if not self.completed:
            return
        assert len(self.responses) == len(self.questions), "response count differs from question count"
        assert self.current_question_index == len(self.questions) - 1, "index not on last question"
        for question, response in zip(self.questions, self.responses):
            assert response.question_id == question.id, f"response for {response.question_id} out of order"
