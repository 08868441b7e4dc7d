import asyncio
from typing import List

import aiohttp
from pydantic import ValidationError
from loguru import logger

from config import config
from mock_interview.clients.base import JsonServiceClient
from mock_interview.orchestrator.schema import ResultSummary
from mock_interview.utils.error_handlers import ResultsQueryError, api_retry_handler


class ResultsClient(JsonServiceClient):
    """Reads a candidate's persisted score summaries, newest first."""

    service_name = "Results service"

    @api_retry_handler()
    async def _get(self, email: str) -> tuple:
        await self._ensure_session()
        async with self.session.get(f"{self.base_url}/api/getAnalyze", params={"email": email}) as response:
            if response.status >= 500:
                raise aiohttp.ClientResponseError(
                    response.request_info, response.history, status=response.status
                )
            return response.status, await self._read_json(response)

    async def fetch_results(self, email: str, limit: int = None) -> List[ResultSummary]:
        if not email:
            raise ResultsQueryError("Email parameter required")

        limit = limit or config.services.results_limit
        try:
            status, body = await self._get(email)
        except (aiohttp.ClientError, ValueError, asyncio.TimeoutError) as e:
            logger.error(f"Results request failed: {e}")
            raise ResultsQueryError("Failed to fetch results") from e

        if status != 200 or not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            raise ResultsQueryError(error or "Failed to fetch results")

        try:
            rows = [ResultSummary.model_validate(row) for row in body.get("data") or []]
        except ValidationError as e:
            raise ResultsQueryError(f"Malformed results: {e.error_count()} schema errors") from e

        # Newest first; rows without a timestamp keep the service order
        rows.sort(key=lambda r: r.created_at.timestamp() if r.created_at else 0.0, reverse=True)
        logger.info(f"Fetched {len(rows)} prior results for {email}")
        return rows[:limit]
