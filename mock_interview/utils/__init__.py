from .logger import setup_logging
from .error_handlers import (
    ErrorSeverity,
    InterviewError,
    DeviceError,
    QuestionBankError,
    TranscriptionError,
    ScoringError,
    ResultsQueryError,
    SubmissionRejected,
    api_retry_handler,
    safe_async_call,
)

__all__ = [
    # logger.py
    'setup_logging',

    # error_handlers.py
    'ErrorSeverity',
    'InterviewError',
    'DeviceError',
    'QuestionBankError',
    'TranscriptionError',
    'ScoringError',
    'ResultsQueryError',
    'SubmissionRejected',
    'api_retry_handler',
    'safe_async_call',
]
