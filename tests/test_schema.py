import pytest
from pydantic import ValidationError

from mock_interview.orchestrator.schema import (
    AnalysisResult, InterviewResults, InterviewTranscript, Question, Response, SKIPPED_ANSWER
)
from mock_interview.orchestrator.state_manager import SessionState


def test_question_is_immutable():
    question = Question(id=1, question="Why this role?")

    with pytest.raises(ValidationError):
        question.question = "Something else"


def test_question_difficulty_is_validated():
    with pytest.raises(ValidationError):
        Question(id=1, question="Why?", difficulty="impossible")


def test_response_serialises_with_wire_names():
    response = Response(question_id=3, question="Do you know Go?", response=SKIPPED_ANSWER)

    wire = response.to_wire()

    assert wire["questionId"] == 3
    assert wire["timestamp"].endswith("Z")
    assert response.skipped


def test_question_set_accepts_wire_names(question_set):
    assert question_set.candidate_name == "Sam"
    assert question_set.candidate_info.experience_level == "mid"
    assert [q.id for q in question_set.questions] == [1, 2, 3]


@pytest.mark.parametrize("override", [
    {"overallScore": 120},
    {"technicalScore": 11},
    {"recommendation": "Maybe"},
    {"scoreBreakdown": {"clarity": 12}},
])
def test_analysis_rejects_out_of_range_values(analysis_payload, override):
    with pytest.raises(ValidationError):
        AnalysisResult.model_validate({**analysis_payload, **override})


def test_snapshot_counts_questions_and_responses(question_set):
    question = question_set.questions[0]
    transcript = InterviewTranscript(
        email="sam@example.com",
        questions=question_set.questions,
        responses=[Response(question_id=question.id, question=question.question, response="Yes")],
    )

    snapshot = InterviewResults.from_transcript(transcript)

    assert snapshot.total_questions == 3
    assert snapshot.total_responses == 1
    assert snapshot.to_wire()["completedAt"].endswith("Z")


def test_completed_session_invariants(question_set):
    questions = question_set.questions
    responses = [Response(question_id=q.id, question=q.question, response="ok") for q in questions]
    session = SessionState(
        questions=questions, responses=responses, completed=True, current_question_index=2
    )

    session.check_invariants()

    session.responses = list(reversed(responses))
    with pytest.raises(AssertionError):
        session.check_invariants()

    session.responses = responses[:2]
    with pytest.raises(AssertionError):
        session.check_invariants()
