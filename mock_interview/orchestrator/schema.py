from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


SKIPPED_ANSWER = "[Skipped]"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class WireModel(BaseModel):
    """Base for payloads exchanged with the collaborator services (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Question(WireModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: Union[int, str]
    question: str
    category: str = "general"
    difficulty: Difficulty = Difficulty.MEDIUM


class CandidateInfo(WireModel):
    name: Optional[str] = None
    position: Optional[str] = None
    experience_level: Optional[str] = Field(None, alias="experienceLevel")
    total_duration: Optional[Union[int, str]] = Field(None, alias="totalDuration")


class QuestionSet(WireModel):
    """Question bank payload: ordered questions plus candidate/position metadata."""
    questions: List[Question] = Field(default_factory=list)
    candidate_name: Optional[str] = Field(None, alias="candidateName")
    position: Optional[str] = None
    experience_level: Optional[str] = Field(None, alias="experienceLevel")
    total_duration: Optional[Union[int, str]] = Field(None, alias="totalDuration")

    @property
    def candidate_info(self) -> CandidateInfo:
        return CandidateInfo(
            name=self.candidate_name,
            position=self.position,
            experience_level=self.experience_level,
            total_duration=self.total_duration,
        )


class Response(WireModel):
    question_id: Union[int, str] = Field(..., alias="questionId")
    question: str
    response: str
    timestamp: str = Field(default_factory=utc_now_iso)

    @property
    def skipped(self) -> bool:
        return self.response == SKIPPED_ANSWER


class DetailedFeedback(WireModel):
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    technical_analysis: Optional[str] = Field(None, alias="technicalAnalysis")
    communication_analysis: Optional[str] = Field(None, alias="communicationAnalysis")
    cultural_fit: Optional[str] = Field(None, alias="culturalFit")
    specific_insights: List[str] = Field(default_factory=list, alias="specificInsights")


class AnalysisResult(WireModel):
    """Scored assessment produced by the scoring service. Read-only here."""
    overall_score: float = Field(..., alias="overallScore", ge=0, le=100)
    technical_score: Optional[float] = Field(None, alias="technicalScore", ge=0, le=10)
    communication_score: Optional[float] = Field(None, alias="communicationScore", ge=0, le=10)
    recommendation: Literal["Hire", "Consider", "Reject"]
    final_feedback: Optional[str] = Field(None, alias="finalFeedback")
    detailed_feedback: DetailedFeedback = Field(default_factory=DetailedFeedback, alias="detailedFeedback")
    score_breakdown: Dict[str, float] = Field(default_factory=dict, alias="scoreBreakdown")
    next_steps: Optional[str] = Field(None, alias="nextSteps")

    @field_validator("score_breakdown")
    @classmethod
    def sub_scores_in_range(cls, v: Dict[str, float]) -> Dict[str, float]:
        for dimension, score in v.items():
            if not 0 <= score <= 10:
                raise ValueError(f"Sub-score '{dimension}' out of range [0, 10]: {score}")
        return v


class ScoringResult(WireModel):
    detailed_analysis: AnalysisResult = Field(..., alias="detailedAnalysis")
    analysis_id: Optional[Union[int, str]] = Field(None, alias="analysisId")
    saved_at: Optional[str] = Field(None, alias="savedAt")


class InterviewTranscript(WireModel):
    """Everything the scoring service needs for one completed session."""
    email: Optional[str] = None
    job_id: Optional[Union[int, str]] = Field(None, alias="jobId")
    candidate_info: CandidateInfo = Field(default_factory=CandidateInfo, alias="candidateInfo")
    questions: List[Question]
    responses: List[Response]


class InterviewResults(InterviewTranscript):
    """Backup snapshot written on every completed session."""
    completed_at: str = Field(default_factory=utc_now_iso, alias="completedAt")
    total_questions: int = Field(..., alias="totalQuestions")
    total_responses: int = Field(..., alias="totalResponses")

    @classmethod
    def from_transcript(cls, transcript: InterviewTranscript) -> "InterviewResults":
        return cls(
            email=transcript.email,
            job_id=transcript.job_id,
            candidate_info=transcript.candidate_info,
            questions=transcript.questions,
            responses=transcript.responses,
            total_questions=len(transcript.questions),
            total_responses=len(transcript.responses),
        )


class ResultSummary(BaseModel):
    """One persisted score summary from the results query service."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    email: Optional[str] = None
    job_id: Optional[Union[int, str]] = None
    candidate_name: Optional[str] = None
    position: Optional[str] = None
    overall_score: Optional[float] = None
    technical_score: Optional[float] = None
    communication_score: Optional[float] = None
    final_feedback: Optional[str] = None
    recommendation: Optional[str] = None
    total_questions: Optional[int] = None
    questions_answered: Optional[int] = None
    created_at: Optional[datetime] = None
