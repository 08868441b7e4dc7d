"""
Capture manager.

Owns the camera and microphone for one interview session. Device handles
never leave this module; callers see readiness flags, recording handles and
finished audio payloads. Device failures become messages in the error slot
instead of exceptions.
"""

import itertools
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from loguru import logger

from mock_interview.utils.error_handlers import DeviceError


CAMERA_ERROR = "Unable to access camera. Please ensure camera permissions are granted."


class CaptureState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    camera_ready: bool = False
    video_stream: Any = None
    is_recording: bool = False
    audio_blob: Optional[bytes] = None
    error: Optional[str] = None


class CaptureResult(BaseModel):
    ready: bool
    reason: Optional[str] = None


class RecordingHandle(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: int
    track: Any = Field(repr=False)
    started_at: datetime = Field(default_factory=datetime.now)
    finished: bool = False


class CaptureManager:
    """
    Acquires and releases capture devices.

    Args:
        camera: backend with ``async open()`` returning a stream with ``stop()``
        microphone: backend with ``async open()`` returning a track with ``async stop() -> bytes``
        display_sink: optional object with ``attach(stream)``/``detach()`` showing the video
    """

    def __init__(self, camera, microphone, display_sink=None):
        self.camera = camera
        self.microphone = microphone
        self.display_sink = display_sink
        self.state = CaptureState()
        self._recording: Optional[RecordingHandle] = None
        self._handle_ids = itertools.count(1)

    @property
    def camera_ready(self) -> bool:
        return self.state.camera_ready

    @property
    def is_recording(self) -> bool:
        return self.state.is_recording

    async def acquire_video(self) -> CaptureResult:
        """Request the camera and bind it to the display sink."""
        self._stop_video()

        try:
            stream = await self.camera.open()
        except Exception as e:
            logger.error(f"Error accessing camera: {e}")
            self.state.camera_ready = False
            self.state.error = CAMERA_ERROR
            return CaptureResult(ready=False, reason=CAMERA_ERROR)

        self.state.video_stream = stream
        if self.display_sink is not None:
            self.display_sink.attach(stream)
        self.state.camera_ready = True
        self.state.error = None
        logger.info("Camera ready")
        return CaptureResult(ready=True)

    async def start_audio_capture(self) -> Optional[RecordingHandle]:
        """Open the microphone and start buffering. Returns None if the device is unavailable."""
        if self._recording is not None:
            logger.warning("Recording already in progress")
            return self._recording

        try:
            track = await self.microphone.open()
        except DeviceError as e:
            message = e.user_message
            logger.error(f"Recording error: {message}")
            self.state.error = f"Failed to start recording: {message}"
            return None
        except Exception as e:
            message = str(e)
            logger.opt(exception=e).error(f"Recording error: {message}")
            self.state.error = f"Failed to start recording: {message}"
            return None

        self._recording = RecordingHandle(id=next(self._handle_ids), track=track)
        self.state.is_recording = True
        self.state.error = None
        logger.debug(f"Recording #{self._recording.id} started")
        return self._recording

    async def stop_audio_capture(self, handle: Optional[RecordingHandle]) -> Optional[bytes]:
        """
        Finalize the buffered audio and release the microphone.

        No-op (returns None) when not recording or when ``handle`` is stale.
        """
        if handle is None or handle.finished or handle is not self._recording:
            logger.debug("Stop requested with no matching recording in progress")
            return None

        handle.finished = True
        self._recording = None
        self.state.is_recording = False
        try:
            blob = await handle.track.stop()
        except Exception as e:
            logger.error(f"Failed to finalize recording #{handle.id}: {e}")
            self.state.error = f"Recording failed: {e}"
            return None

        self.state.audio_blob = blob
        logger.debug(f"Recording #{handle.id} finalized ({len(blob or b'')} bytes)")
        return blob

    def reset_turn(self):
        """Forget the previous answer's audio and any capture message."""
        self.state.audio_blob = None
        self.state.error = None

    async def release(self):
        """Stop every track, on any exit path. Safe to call repeatedly."""
        if self._recording is not None:
            handle = self._recording
            await self.stop_audio_capture(handle)
        self._stop_video()
        logger.debug("Capture devices released")

    def _stop_video(self):
        stream = self.state.video_stream
        if stream is None:
            return
        if self.display_sink is not None:
            self.display_sink.detach()
        try:
            stream.stop()
        except Exception as e:
            logger.warning(f"Error while stopping video stream: {e}")
        self.state.video_stream = None
        self.state.camera_ready = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.release()
