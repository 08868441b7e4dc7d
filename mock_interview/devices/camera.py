# mock_interview/devices/camera.py

import asyncio
from typing import Optional

import cv2
from loguru import logger
from rich.console import Console

from config import config
from mock_interview.utils.error_handlers import DeviceError


class CameraStream:
    """A live OpenCV capture. Owned by the capture manager."""

    def __init__(self, capture: "cv2.VideoCapture", index: int):
        self._capture = capture
        self.index = index
        self.width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))

    @property
    def active(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    def read_frame(self):
        if not self.active:
            return None
        ok, frame = self._capture.read()
        return frame if ok else None

    def stop(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.debug(f"Camera #{self.index} released")


class OpenCVCamera:
    def __init__(self, index: int = None, width: int = None, height: int = None):
        self.index = config.capture.camera_index if index is None else index
        self.width = width or config.capture.video_width
        self.height = height or config.capture.video_height

    def _open_blocking(self) -> CameraStream:
        capture = cv2.VideoCapture(self.index)
        if capture is None or not capture.isOpened():
            raise DeviceError(f"Unable to open video source #{self.index}")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        # A camera that opens but yields no frame is as good as denied
        ok, _ = capture.read()
        if not ok:
            capture.release()
            raise DeviceError(f"Could not read a frame from video source #{self.index}")

        return CameraStream(capture, self.index)

    async def open(self) -> CameraStream:
        """Open the camera off the event loop. Raises DeviceError on failure."""
        stream = await asyncio.to_thread(self._open_blocking)
        logger.info(f"Camera #{self.index} opened at {stream.width}x{stream.height}")
        return stream


class TerminalPreview:
    """Display sink for the terminal app: reports the bound stream instead of drawing it."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.stream: Optional[CameraStream] = None

    def attach(self, stream: CameraStream):
        self.stream = stream
        self.console.print(f"[green]📷 Camera on[/green] [dim](#{stream.index}, {stream.width}x{stream.height})[/dim]")

    def detach(self):
        if self.stream is not None:
            self.console.print("[dim]📷 Camera off[/dim]")
        self.stream = None
