"""
pyttsx3 client - callback-driven local speech synthesis with interruption
"""
import asyncio
import queue
import threading
import time
from dataclasses import dataclass, field

import pyttsx3
from loguru import logger

from config import config


@dataclass
class _Utterance:
    text: str
    generation: int = 0
    done: threading.Event = field(default_factory=threading.Event)
    completed: bool = False


class Pyttsx3Client:
    def __init__(self, driver: str = None):
        """
        Start the TTS worker thread. The engine lives on that thread only.
        """
        logger.info("Starting pyttsx3 TTS client")
        self.driver = driver or config.speech.tts_driver
        self.rate = config.speech.tts_rate
        self.volume = config.speech.tts_volume
        self.backend = "pyttsx3"

        self.tts_queue: "queue.Queue[_Utterance]" = queue.Queue()
        self.stop_event = threading.Event()
        self._generation = 0
        self._generation_lock = threading.Lock()

        self.tts_thread = threading.Thread(target=self._tts_worker, daemon=True)
        self.tts_thread.start()
        logger.info("TTS worker thread started")

    def stop_playback(self):
        """
        Interrupt the utterance being spoken and drop queued ones.
        """
        logger.debug("Stop signal received")
        with self._generation_lock:
            self._generation += 1
        with self.tts_queue.mutex:
            pending = list(self.tts_queue.queue)
            self.tts_queue.queue.clear()
        for utterance in pending:
            if utterance is not None:
                utterance.done.set()

    def _tts_worker(self):
        """
        Speak queued utterances one at a time, polling for interruption.
        """
        try:
            engine = pyttsx3.init(self.driver) if self.driver else pyttsx3.init()
            engine.setProperty('rate', self.rate)
            engine.setProperty('volume', self.volume)

            utterance_complete = threading.Event()
            finished = {"completed": False}

            def on_end(name, completed):
                finished["completed"] = completed
                utterance_complete.set()

            engine.connect('finished-utterance', on_end)

        except Exception as e:
            logger.error(f"TTS engine failed to start: {e}")
            self._drain_on_failure()
            return

        while not self.stop_event.is_set():
            try:
                utterance = self.tts_queue.get(timeout=1.0)
            except queue.Empty:
                continue

            if utterance is None:  # stop signal
                break

            if self._cancelled(utterance):
                utterance.done.set()
                continue

            try:
                utterance_complete.clear()
                finished["completed"] = False
                start_time = time.time()
                logger.debug(f"🔊 Speaking: {utterance.text[:50]}...")

                engine.say(utterance.text)
                engine.startLoop(False)
                interrupted = False
                while not utterance_complete.is_set():
                    if self._cancelled(utterance) or self.stop_event.is_set():
                        engine.stop()
                        interrupted = True
                        break
                    engine.iterate()
                    time.sleep(0.05)
                engine.endLoop()

                utterance.completed = finished["completed"] and not interrupted
                logger.debug(
                    f"Utterance {'finished' if utterance.completed else 'interrupted'} "
                    f"after {time.time() - start_time:.1f}s"
                )
            except Exception as e:
                logger.error(f"TTS worker error: {e}")
            finally:
                utterance.done.set()

        logger.info("TTS worker stopped")

    def _cancelled(self, utterance: _Utterance) -> bool:
        """An utterance queued before the latest stop must not play."""
        return utterance.generation != self._generation

    def _drain_on_failure(self):
        """Unblock callers when the engine never came up."""
        while not self.stop_event.is_set():
            try:
                utterance = self.tts_queue.get(timeout=1.0)
            except queue.Empty:
                continue
            if utterance is None:
                break
            utterance.done.set()

    async def say(self, text: str) -> bool:
        """
        Speak ``text`` and wait until it finishes.

        Returns:
            True if the utterance played to the end, False if interrupted or failed
        """
        if not text or not text.strip():
            return True

        with self._generation_lock:
            utterance = _Utterance(text=text, generation=self._generation)
        self.tts_queue.put(utterance)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, utterance.done.wait)
        return utterance.completed

    async def test_connection(self) -> bool:
        """Check the speech engine with a short utterance."""
        try:
            return await self.say("Audio check.")
        except Exception as e:
            logger.error(f"❌ pyttsx3 TTS test failed: {e}")
            return False

    def cleanup(self):
        """Stop the worker and release the engine"""
        logger.info("Cleaning up TTS client...")
        self.stop_playback()
        self.stop_event.set()
        self.tts_queue.put(None)
        if self.tts_thread.is_alive():
            self.tts_thread.join(timeout=2.0)
        logger.info("TTS client cleaned up")
