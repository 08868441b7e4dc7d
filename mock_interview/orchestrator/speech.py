import asyncio
from typing import Optional

from loguru import logger

from mock_interview.utils.error_handlers import safe_async_call


class SpeechChannel:
    """
    Plays utterances through a synthesizer backend, one at a time.

    A new utterance cancels the one in flight and stops backend playback.
    The backend needs ``async say(text) -> bool`` and ``stop_playback()``.
    """

    def __init__(self, synthesizer):
        self.synthesizer = synthesizer
        self._task: Optional[asyncio.Task] = None

    @property
    def is_speaking(self) -> bool:
        return self._task is not None and not self._task.done()

    async def speak(self, text: str) -> bool:
        """
        Speak ``text`` and wait for it.

        Returns:
            True if the utterance played to the end, False if it was
            superseded, cancelled or the backend failed
        """
        self.cancel()

        task = asyncio.create_task(self._play(text))
        self._task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # The caller was cancelled; take the utterance down with it
            if self._task is task:
                self.cancel()
            else:
                task.cancel()
            raise

        if task.cancelled():
            logger.debug(f"Utterance superseded: {text[:50]}")
            return False
        return bool(task.result())

    def cancel(self):
        """Stop whatever is playing."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            self.synthesizer.stop_playback()
        except Exception as e:
            logger.warning(f"Backend refused to stop playback: {e}")

    @safe_async_call(fallback_value=False)
    async def _play(self, text: str) -> bool:
        logger.debug(f"🗣️ {text}")
        return await self.synthesizer.say(text)
