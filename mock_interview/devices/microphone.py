# mock_interview/devices/microphone.py

import asyncio
import io
import time
import wave
from typing import Optional

import numpy as np
import pyaudio
from loguru import logger

from config import config
from mock_interview.utils.error_handlers import DeviceError


class MicrophoneTrack:
    """
    One open input stream. Chunks are read on a worker thread until stop()
    finalizes them into a WAV payload and closes the stream.
    """

    def __init__(self, stream, sample_rate: int, channels: int, chunk_size: int, sample_width: int):
        self.stream = stream
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_size = chunk_size
        self.sample_width = sample_width
        self.frames = []
        self.is_recording = False
        self.started_at = 0.0
        self._reader: Optional[asyncio.Task] = None

    def start(self):
        self.is_recording = True
        self.started_at = time.time()
        self._reader = asyncio.create_task(self._read_loop())

    async def _read_loop(self):
        while self.is_recording:
            try:
                data = await asyncio.to_thread(self.stream.read, self.chunk_size, exception_on_overflow=False)
            except OSError as e:
                logger.error(f"Audio read error: {e}")
                break
            if data:
                self.frames.append(data)

    async def stop(self) -> bytes:
        """Finish the pending read, close the device and return the recording as WAV."""
        self.is_recording = False
        if self._reader is not None:
            await self._reader
            self._reader = None
        self._close()

        wav_data = self._frames_to_wav(self.frames)
        duration = time.time() - self.started_at
        level = self._rms(self.frames)
        if level < config.capture.silence_threshold:
            logger.warning(f"Recording looks silent (RMS {level:.0f})")
        logger.info(f"Recording finished. Duration: {duration:.1f}s, Size: {len(wav_data)/1024:.1f}KB")
        return wav_data

    def _close(self):
        if self.stream:
            try:
                if self.stream.is_active():
                    self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.warning(f"Error while closing input stream: {e}")
            finally:
                self.stream = None

    def _rms(self, frames: list) -> float:
        if not frames:
            return 0.0
        samples = np.frombuffer(b''.join(frames), dtype=np.int16)
        if samples.size == 0:
            return 0.0
        return float(np.sqrt(np.mean(samples.astype(np.float64) ** 2)))

    def _frames_to_wav(self, frames: list) -> bytes:
        if not frames:
            return b''
        buffer = io.BytesIO()
        with wave.open(buffer, 'wb') as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(self.sample_width)
            wf.setframerate(self.sample_rate)
            wf.writeframes(b''.join(frames))
        return buffer.getvalue()


class PyAudioMicrophone:
    def __init__(self):
        self.audio = pyaudio.PyAudio()
        self.sample_rate = config.capture.sample_rate
        self.channels = config.capture.channels
        self.chunk_size = config.capture.chunk_size
        self.input_device_index = config.capture.input_device_index
        self.format = pyaudio.paInt16
        logger.info("Microphone backend ready")

    def list_input_devices(self) -> list:
        devices = []
        for i in range(self.audio.get_device_count()):
            info = self.audio.get_device_info_by_index(i)
            if info['maxInputChannels'] > 0:
                devices.append(f"#{i}: {info['name']} ({info['maxInputChannels']} ch)")
        return devices

    def has_input_device(self) -> bool:
        try:
            self.audio.get_default_input_device_info()
            return True
        except (IOError, OSError):
            return bool(self.list_input_devices())

    async def open(self) -> MicrophoneTrack:
        """Open an input stream and start buffering. Raises DeviceError when unavailable."""
        try:
            stream = await asyncio.to_thread(
                self.audio.open,
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.input_device_index,
                frames_per_buffer=self.chunk_size,
            )
        except (IOError, OSError, ValueError) as e:
            raise DeviceError(f"Microphone unavailable: {e}") from e

        track = MicrophoneTrack(
            stream,
            sample_rate=self.sample_rate,
            channels=self.channels,
            chunk_size=self.chunk_size,
            sample_width=self.audio.get_sample_size(self.format),
        )
        track.start()
        logger.info("Recording started")
        return track

    def cleanup(self):
        """Release PortAudio"""
        if self.audio:
            self.audio.terminate()
            self.audio = None
        logger.info("Microphone backend released")
