"""
Question bank client.

Fetches the ordered interview questions and the candidate/position metadata
generated from the candidate's résumé.
"""

import asyncio
from typing import Optional

import aiohttp
from pydantic import ValidationError
from loguru import logger

from mock_interview.clients.base import JsonServiceClient
from mock_interview.orchestrator.schema import QuestionSet
from mock_interview.utils.error_handlers import QuestionBankError, api_retry_handler


class QuestionBankClient(JsonServiceClient):

    service_name = "Question bank"

    @api_retry_handler()
    async def _get(self, email: Optional[str]) -> dict:
        await self._ensure_session()
        url = f"{self.base_url}/api/userQuestions"
        params = {"email": email} if email else {}

        async with self.session.get(url, params=params) as response:
            body = await self._read_json(response)
            if response.status == 404:
                # Nothing generated for this candidate; retrying will not help
                return body
            if response.status >= 500:
                raise aiohttp.ClientResponseError(
                    response.request_info, response.history,
                    status=response.status, message=str(body)[:200]
                )
            return body

    async def fetch_questions(self, email: Optional[str]) -> QuestionSet:
        """
        Load the candidate's question set.

        Raises:
            QuestionBankError: the service failed or returned no questions.
        """
        logger.info(f"Fetching interview questions for {email or 'default set'}")
        try:
            body = await self._get(email)
        except (aiohttp.ClientError, ValueError, asyncio.TimeoutError) as e:
            logger.error(f"Question bank request failed: {e}")
            raise QuestionBankError("Failed to fetch interview questions") from e

        if not isinstance(body, dict) or not body.get("success") or not body.get("data"):
            message = (body or {}).get("error") if isinstance(body, dict) else None
            raise QuestionBankError(message or "No questions found")

        try:
            question_set = QuestionSet.model_validate(body["data"])
        except ValidationError as e:
            logger.error(f"Malformed question set: {e}")
            raise QuestionBankError("Interview questions are malformed") from e

        logger.info(f"Loaded {len(question_set.questions)} questions for {question_set.position or 'unknown position'}")
        return question_set
