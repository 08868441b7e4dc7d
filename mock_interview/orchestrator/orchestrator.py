"""
AI Mock Interview - Turn Controller

Drives one interview session: the AI reads each question, the candidate
records an answer, the answer is transcribed and submitted (or skipped), and
after the last question the full transcript goes to the session reporter.

User actions are gated on the current turn state. An action that is not
valid in the current state is rejected, leaves the session untouched and
records a message in ``session.error``. Collaborator failures are caught
here and turned into state; nothing is raised to the caller.
"""

import asyncio
from typing import Iterable, Optional, Union

from loguru import logger

from config import config
from mock_interview.orchestrator.capture import CaptureManager, RecordingHandle
from mock_interview.orchestrator.reporter import ReportOutcome, SessionReporter
from mock_interview.orchestrator.schema import SKIPPED_ANSWER, Question, Response
from mock_interview.orchestrator.speech import SpeechChannel
from mock_interview.orchestrator.state_manager import (
    RECORDABLE_STATES, SKIPPABLE_STATES, SessionState, TurnState
)
from mock_interview.utils.error_handlers import (
    QuestionBankError, SubmissionRejected, TranscriptionError
)


SESSION_CLOSED = "The interview session has ended."
CAMERA_NOT_READY = "Please ensure your camera is ready before starting the interview."
TRANSCRIPTION_FAILED = "Failed to transcribe audio. Please try again."
NO_QUESTIONS = "No interview questions available."


class InterviewOrchestrator:
    """Runs the question/answer loop of one interview session."""

    def __init__(
        self,
        email: str,
        job_id: Optional[Union[int, str]],
        question_bank,
        capture: CaptureManager,
        speech: SpeechChannel,
        transcriber,
        reporter: SessionReporter,
        messages=None,
        transition_pause: Optional[float] = None,
    ):
        """
        Args:
            email: candidate email, used to look up the question set
            job_id: job the interview is for, echoed to the scoring service
            question_bank: client with ``async fetch_questions(email) -> QuestionSet``
            capture: owns camera and microphone
            speech: plays the interviewer's lines
            transcriber: client with ``async transcribe_audio(bytes) -> str``
            reporter: scores and stores the finished transcript
            messages: interviewer lines (defaults to ``config.interview``)
            transition_pause: seconds between a transition line and the next question
        """
        self.question_bank = question_bank
        self.capture = capture
        self.speech = speech
        self.transcriber = transcriber
        self.reporter = reporter
        self.messages = messages or config.interview
        self.transition_pause = (
            self.messages.transition_pause if transition_pause is None else transition_pause
        )

        self.session = SessionState(email=email, job_id=job_id)
        self.outcome: Optional[ReportOutcome] = None

        self._prompt_task: Optional[asyncio.Task] = None
        self._recording: Optional[RecordingHandle] = None
        self._closed = False

    # --- Read-only views ---

    @property
    def state(self) -> TurnState:
        return self.session.turn_state

    @property
    def current_question(self) -> Optional[Question]:
        return self.session.current_question

    @property
    def can_start(self) -> bool:
        return (
            self.state == TurnState.SETUP
            and not self.session.started
            and self.capture.camera_ready
            and bool(self.session.questions)
        )

    # --- Setup ---

    async def setup(self) -> bool:
        """
        Load the question set and acquire the camera.

        On failure the session stays in SETUP with a message; call again to retry.
        """
        if self.state not in (TurnState.IDLE, TurnState.SETUP):
            return self._reject("Interview setup is already complete")

        self._transition(TurnState.SETUP)
        self.session.error = None

        if not self.session.questions:
            try:
                question_set = await self.question_bank.fetch_questions(self.session.email)
            except QuestionBankError as e:
                logger.error(f"Question bank error: {e}")
                self.session.error = e.user_message
                return False

            if not question_set.questions:
                logger.error("Question bank returned an empty question set")
                self.session.error = NO_QUESTIONS
                return False

            self.session.questions = list(question_set.questions)
            self.session.candidate_info = question_set.candidate_info
            logger.info(f"Loaded {len(self.session.questions)} questions for {self.session.email}")

        if not self.capture.camera_ready:
            result = await self.capture.acquire_video()
            if not result.ready:
                self.session.error = result.reason
                return False

        logger.success("Setup complete, ready to start")
        return True

    # --- User actions ---

    async def start(self) -> bool:
        """Begin the interview: welcome line, then the first question."""
        if self._closed:
            return self._reject(SESSION_CLOSED)
        if not self.can_start:
            return self._reject(CAMERA_NOT_READY)

        self.session.started = True
        self.session.current_question_index = 0
        self.session.error = None

        info = self.session.candidate_info
        welcome = self.messages.welcome_template.format(
            name=info.name or "there",
            position=info.position or "job",
            count=len(self.session.questions),
        )
        logger.info(f"Interview started: {len(self.session.questions)} questions")
        self._speak_then_await_answer([welcome, self._question_line()])
        return True

    async def start_recording(self) -> bool:
        """Open the microphone for the current question (also used to re-record)."""
        if self._closed:
            return self._reject(SESSION_CLOSED)
        if self.state not in RECORDABLE_STATES:
            return self._reject("Recording is not available right now")

        self.capture.reset_turn()
        self.session.current_transcript = ""
        self.session.error = None
        self._transition(TurnState.RECORDING)

        handle = await self.capture.start_audio_capture()
        if handle is None:
            self.session.error = self.capture.state.error
            self._transition(TurnState.AWAITING_RECORDING)
            return False

        self._recording = handle
        return True

    async def stop_recording(self) -> bool:
        """Finish the recording and transcribe it."""
        if self.state != TurnState.RECORDING:
            return self._reject("No recording in progress")

        self._transition(TurnState.TRANSCRIBING)
        handle, self._recording = self._recording, None
        audio = await self.capture.stop_audio_capture(handle)

        text = None
        if audio:
            try:
                text = await self.transcriber.transcribe_audio(audio)
            except TranscriptionError as e:
                logger.error(f"Transcription error: {e}")
            except Exception as e:
                logger.opt(exception=e).error(f"Unexpected transcription failure: {e}")
        else:
            logger.warning("Recording produced no audio")

        if self._closed or self.state != TurnState.TRANSCRIBING:
            logger.info("Session closed during transcription, dropping the result")
            return False

        if text is None:
            self.session.error = TRANSCRIPTION_FAILED
            self.session.current_transcript = ""
            self._transition(TurnState.AWAITING_RECORDING)
            return False

        self.session.current_transcript = text
        self._transition(TurnState.AWAITING_SUBMIT)
        logger.info(f"Transcript ready ({len(text)} chars)")
        return True

    async def submit(self) -> bool:
        """Record the transcribed answer and move on."""
        if self._closed:
            return self._reject(SESSION_CLOSED)
        if self.state != TurnState.AWAITING_SUBMIT:
            return self._reject("There is no response to submit")

        answer = self.session.current_transcript.strip()
        if not answer:
            return self._reject("Please record a response before submitting")

        self._record_response(answer)
        self._advance(self.messages.submit_transition)
        return True

    async def skip(self) -> bool:
        """Skip the current question, keeping any transcript that is already there."""
        if self._closed:
            return self._reject(SESSION_CLOSED)
        if (
            not self.session.started
            or self.session.completed
            or self.state not in SKIPPABLE_STATES
            or self.session.current_answered
        ):
            return self._reject("Cannot skip right now")

        if self.state == TurnState.SPEAKING:
            self._cancel_prompt()

        answer = self.session.current_transcript.strip() or SKIPPED_ANSWER
        self._record_response(answer)
        self._advance(self.messages.skip_transition)
        return True

    async def wait_for_speech(self):
        """Wait until the interviewer has nothing left to say."""
        while self._prompt_task is not None and not self._prompt_task.done():
            await asyncio.wait({self._prompt_task})

    async def close(self):
        """Stop speech and release every device. Safe to call more than once."""
        self._closed = True
        task = self._prompt_task
        self._cancel_prompt()
        if task is not None and not task.done():
            await asyncio.wait({task})

        if self._recording is not None:
            handle, self._recording = self._recording, None
            await self.capture.stop_audio_capture(handle)
        if self.state in (TurnState.RECORDING, TurnState.TRANSCRIBING):
            self._transition(TurnState.AWAITING_RECORDING)

        await self.capture.release()
        logger.info("Interview session closed")

    # --- Internals ---

    def _transition(self, new_state: TurnState):
        old_state = self.session.turn_state
        if old_state == new_state:
            return
        self.session.turn_state = new_state
        logger.info(f"Turn state: {old_state.value} -> {new_state.value}")

    def _reject(self, message: str) -> bool:
        rejection = SubmissionRejected(message)
        logger.warning(f"Action rejected in {self.state.value}: {rejection}")
        self.session.error = rejection.user_message
        return False

    def _question_line(self) -> str:
        question = self.session.current_question
        return self.messages.question_template.format(
            number=self.session.current_question_index + 1,
            text=question.question,
        )

    def _record_response(self, answer: str):
        question = self.session.current_question
        self.session.responses.append(
            Response(question_id=question.id, question=question.question, response=answer)
        )
        self.session.error = None
        status = "skipped" if answer == SKIPPED_ANSWER else "answered"
        logger.info(
            f"Question {self.session.current_question_index + 1}/{len(self.session.questions)} {status}"
        )

    def _advance(self, transition_line: str):
        self.capture.reset_turn()
        self.session.current_transcript = ""

        if self.session.is_last_question:
            self._transition(TurnState.FINISHING)
            self._run_prompt(self._finish())
            return

        self.session.current_question_index += 1
        self._speak_then_await_answer(
            [transition_line, self.transition_pause, self._question_line()]
        )

    def _speak_then_await_answer(self, steps: Iterable[Union[str, float]]):
        self._transition(TurnState.SPEAKING)
        self._run_prompt(self._speak_sequence(list(steps)))

    async def _speak_sequence(self, steps):
        self.session.speech_done = False
        try:
            for step in steps:
                if isinstance(step, str):
                    await self.speech.speak(step)
                elif step:
                    await asyncio.sleep(step)
        finally:
            self.session.speech_done = True

        if self.state == TurnState.SPEAKING:
            self._transition(TurnState.AWAITING_RECORDING)

    async def _finish(self):
        self.session.speech_done = False
        try:
            await self.speech.speak(self.messages.closing_message)
        finally:
            self.session.speech_done = True

        self.outcome = await self.reporter.finalize(self.session.to_transcript())

        self.session.completed = True
        self._transition(TurnState.COMPLETED)
        self.session.check_invariants()
        logger.success(
            f"Interview completed: {len(self.session.responses)} responses, "
            f"{'scored' if self.outcome.scored else 'not scored'}"
        )

        self.session.speech_done = False
        try:
            await self.speech.speak(
                self.messages.analyzed_message if self.outcome.scored else self.messages.recorded_message
            )
        finally:
            self.session.speech_done = True

    def _run_prompt(self, coro):
        self._cancel_prompt()
        self._prompt_task = asyncio.create_task(coro)

    def _cancel_prompt(self):
        task = self._prompt_task
        if task is not None and not task.done():
            task.cancel()
            self.speech.cancel()
