"""
Session reporter.

Hands a finished transcript to the scoring service and keeps a local copy of
the outcome. Scoring is best effort: the backup snapshot is written whatever
happens, and nothing raised here reaches the turn controller.
"""

from typing import Optional

from pydantic import BaseModel
from loguru import logger

from mock_interview.orchestrator.result_cache import ANALYSIS_KEY, RESULTS_KEY, ResultCache
from mock_interview.orchestrator.schema import (
    AnalysisResult, InterviewResults, InterviewTranscript, ScoringResult
)
from mock_interview.utils.error_handlers import ScoringError


class ReportOutcome(BaseModel):
    scored: bool
    snapshot: InterviewResults
    analysis: Optional[AnalysisResult] = None
    analysis_id: Optional[str] = None
    error: Optional[str] = None


class SessionReporter:
    def __init__(self, scoring_client, cache: ResultCache, analysis_ttl: Optional[float] = None):
        self.scoring_client = scoring_client
        self.cache = cache
        self.analysis_ttl = analysis_ttl

    async def finalize(self, transcript: InterviewTranscript) -> ReportOutcome:
        """
        Score the transcript and cache the outcome.

        Returns:
            ReportOutcome with ``scored`` False when only the snapshot was kept
        """
        snapshot = InterviewResults.from_transcript(transcript)
        result: Optional[ScoringResult] = None
        error: Optional[str] = None

        try:
            result = await self.scoring_client.analyze(transcript)
        except ScoringError as e:
            error = e.user_message
            logger.warning(f"Scoring failed, keeping responses only: {error}")
        except Exception as e:
            error = str(e)
            logger.opt(exception=e).warning(f"Unexpected scoring failure: {error}")

        if result is not None:
            self._write(ANALYSIS_KEY, result.detailed_analysis, ttl=self.analysis_ttl)
        else:
            # An analysis left over from an earlier session must not pass for this one
            self._discard(ANALYSIS_KEY)

        self._write(RESULTS_KEY, snapshot)

        if result is None:
            return ReportOutcome(scored=False, snapshot=snapshot, error=error)

        logger.info(f"Interview analyzed (id {result.analysis_id})")
        return ReportOutcome(
            scored=True,
            snapshot=snapshot,
            analysis=result.detailed_analysis,
            analysis_id=None if result.analysis_id is None else str(result.analysis_id),
        )

    def _write(self, key: str, value, ttl: Optional[float] = None):
        try:
            self.cache.put(key, value, ttl=ttl)
        except OSError as e:
            logger.error(f"Could not cache '{key}': {e}")

    def _discard(self, key: str):
        try:
            self.cache.delete(key)
        except OSError as e:
            logger.error(f"Could not remove stale '{key}': {e}")
