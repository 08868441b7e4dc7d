"""
Scoring service client.

Posts a completed interview transcript and returns the structured analysis
together with the identifier of the persisted score summary.
"""

import asyncio

import aiohttp
from pydantic import ValidationError
from loguru import logger

from mock_interview.clients.base import JsonServiceClient
from mock_interview.orchestrator.schema import InterviewTranscript, ScoringResult
from mock_interview.utils.error_handlers import ScoringError


class ScoringClient(JsonServiceClient):

    service_name = "Scoring service"

    async def analyze(self, transcript: InterviewTranscript) -> ScoringResult:
        """
        Request an assessment for one interview.

        Not retried: each accepted request persists a summary row.

        Raises:
            ScoringError: network failure, non-success status, or a reply that
                does not match the analysis schema
        """
        await self._ensure_session()
        url = f"{self.base_url}/api/analyze"
        payload = transcript.to_wire()

        logger.info(f"Requesting analysis for {len(transcript.responses)} responses")
        try:
            async with self.session.post(url, json=payload) as response:
                body = await self._read_json(response)
                status = response.status
        except (aiohttp.ClientError, ValueError, asyncio.TimeoutError) as e:
            raise ScoringError(f"Failed to analyze interview: {e}") from e

        if status != 200 or not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            raise ScoringError(f"Failed to analyze interview: {status} - {error or 'unknown error'}")

        try:
            result = ScoringResult.model_validate(body.get("data") or {})
        except ValidationError as e:
            raise ScoringError(f"Malformed analysis: {e.error_count()} schema errors") from e

        logger.info(
            f"Analysis {result.analysis_id}: {result.detailed_analysis.overall_score}/100, "
            f"{result.detailed_analysis.recommendation}"
        )
        return result
