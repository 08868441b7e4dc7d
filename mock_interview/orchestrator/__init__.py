from .schema import (
    Question, CandidateInfo, QuestionSet, Response, AnalysisResult,
    ScoringResult, InterviewTranscript, InterviewResults, ResultSummary,
    SKIPPED_ANSWER,
)
from .state_manager import SessionState, TurnState
from .capture import CaptureManager, CaptureState, CaptureResult, RecordingHandle
from .speech import SpeechChannel
from .result_cache import ResultCache, ANALYSIS_KEY, RESULTS_KEY
from .reporter import SessionReporter, ReportOutcome
from .orchestrator import InterviewOrchestrator


__all__ = [
    'Question',
    'CandidateInfo',
    'QuestionSet',
    'Response',
    'AnalysisResult',
    'ScoringResult',
    'InterviewTranscript',
    'InterviewResults',
    'ResultSummary',
    'SKIPPED_ANSWER',
    'SessionState',
    'TurnState',
    'CaptureManager',
    'CaptureState',
    'CaptureResult',
    'RecordingHandle',
    'SpeechChannel',
    'ResultCache',
    'ANALYSIS_KEY',
    'RESULTS_KEY',
    'SessionReporter',
    'ReportOutcome',
    'InterviewOrchestrator',
]
