from enum import Enum
from functools import wraps
from typing import Any, Callable

from loguru import logger
from tenacity import retry, stop_after_attempt, wait_exponential

# --- Error taxonomy ---

class ErrorSeverity(str, Enum):
    """How badly an error affects the interview session."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    FATAL = "fatal"


class InterviewError(Exception):
    """Base error for the interview session."""
    def __init__(self, message, severity=ErrorSeverity.MEDIUM, recoverable=False, recovery_suggestion=""):
        super().__init__(message)
        self.severity = severity
        self.recoverable = recoverable
        self.recovery_suggestion = recovery_suggestion

    def __str__(self):
        return f"[{self.severity.value.upper()}] {super().__str__()}"

    @property
    def user_message(self) -> str:
        """Message text without the severity tag."""
        return super().__str__()


class DeviceError(InterviewError):
    """Camera or microphone denied or unavailable."""
    def __init__(self, message, recovery_suggestion="Check device permissions and try again."):
        super().__init__(message, severity=ErrorSeverity.HIGH, recoverable=True,
                         recovery_suggestion=recovery_suggestion)


class QuestionBankError(InterviewError):
    """Interview questions could not be loaded; the session cannot start."""
    def __init__(self, message):
        super().__init__(message, severity=ErrorSeverity.FATAL, recoverable=False)


class TranscriptionError(InterviewError):
    """Audio could not be turned into text; the candidate records again."""
    def __init__(self, message):
        super().__init__(message, severity=ErrorSeverity.MEDIUM, recoverable=True,
                         recovery_suggestion="Record your answer again.")


class ScoringError(InterviewError):
    """Scoring service failed; only the backup snapshot is kept."""
    def __init__(self, message):
        super().__init__(message, severity=ErrorSeverity.LOW, recoverable=True)


class ResultsQueryError(InterviewError):
    """Prior results could not be fetched."""
    def __init__(self, message):
        super().__init__(message, severity=ErrorSeverity.LOW, recoverable=True)


class SubmissionRejected(InterviewError):
    """A user action was not valid in the current turn state."""
    def __init__(self, message):
        super().__init__(message, severity=ErrorSeverity.LOW, recoverable=True)


# --- Decorators ---

def api_retry_handler(attempts: int = 3):
    """
    Retry an idempotent async API call with exponential backoff.
    Re-raises the last error once the attempts are used up.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        @retry(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            reraise=True
        )
        async def wrapper(*args, **kwargs) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"Retrying API call: {func.__name__}, error: {e}")
                raise
        return wrapper
    return decorator


def safe_async_call(fallback_value: Any = None):
    """Log and swallow any exception from the wrapped coroutine, returning the fallback."""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Safe call failed ({func.__name__}): {e}")
                return fallback_value
        return wrapper
    return decorator
