from pydantic import BaseModel

from mock_interview.orchestrator.capture import (
    CAMERA_ERROR, CaptureManager, CaptureResult, CaptureState, RecordingHandle
)

from tests.conftest import FakeCamera, FakeDisplay, FakeMicrophone, WAV_BYTES


def make_capture(camera=None, microphone=None):
    return CaptureManager(camera or FakeCamera(), microphone or FakeMicrophone(), FakeDisplay())


async def test_acquire_video_binds_stream_to_display():
    capture = make_capture()

    result = await capture.acquire_video()

    assert result.ready
    assert result.reason is None
    assert capture.camera_ready
    assert capture.display_sink.stream is capture.state.video_stream


async def test_acquire_video_failure_reports_reason():
    capture = make_capture(camera=FakeCamera(fail=True))

    result = await capture.acquire_video()

    assert not result.ready
    assert result.reason == CAMERA_ERROR
    assert capture.state.error == CAMERA_ERROR
    assert not capture.camera_ready


async def test_acquire_video_again_stops_the_old_stream():
    camera = FakeCamera()
    capture = make_capture(camera=camera)

    await capture.acquire_video()
    await capture.acquire_video()

    first, second = camera.streams
    assert first.stopped
    assert not second.stopped
    assert capture.state.video_stream is second


async def test_start_while_recording_returns_the_live_handle():
    microphone = FakeMicrophone()
    capture = make_capture(microphone=microphone)

    handle = await capture.start_audio_capture()
    again = await capture.start_audio_capture()

    assert handle is again
    assert capture.is_recording
    assert len(microphone.tracks) == 1


async def test_stop_audio_capture_is_single_shot():
    microphone = FakeMicrophone()
    capture = make_capture(microphone=microphone)
    handle = await capture.start_audio_capture()

    assert await capture.stop_audio_capture(handle) == WAV_BYTES
    assert await capture.stop_audio_capture(handle) is None

    assert microphone.tracks[0].stop_calls == 1
    assert not capture.is_recording
    assert capture.state.audio_blob == WAV_BYTES


async def test_stop_when_not_recording_is_a_no_op():
    capture = make_capture()

    assert await capture.stop_audio_capture(None) is None
    assert capture.state.error is None


async def test_microphone_failure_lands_in_error_slot():
    capture = make_capture(microphone=FakeMicrophone(fail=True))

    handle = await capture.start_audio_capture()

    assert handle is None
    assert not capture.is_recording
    assert capture.state.error == "Failed to start recording: No input device"


async def test_unexpected_microphone_error_lands_in_error_slot():
    capture = make_capture(microphone=FakeMicrophone(error=RuntimeError("PortAudio not initialized")))

    handle = await capture.start_audio_capture()

    assert handle is None
    assert not capture.is_recording
    assert capture.state.error == "Failed to start recording: PortAudio not initialized"


async def test_reset_turn_clears_audio_and_error():
    capture = make_capture()
    handle = await capture.start_audio_capture()
    await capture.stop_audio_capture(handle)
    capture.state.error = "old message"

    capture.reset_turn()

    assert capture.state.audio_blob is None
    assert capture.state.error is None


async def test_release_stops_everything_and_is_idempotent():
    camera = FakeCamera()
    microphone = FakeMicrophone()
    capture = make_capture(camera=camera, microphone=microphone)
    await capture.acquire_video()
    await capture.start_audio_capture()

    await capture.release()
    await capture.release()

    assert camera.streams[0].stopped
    assert microphone.tracks[0].stop_calls == 1
    assert not capture.camera_ready
    assert not capture.is_recording
    assert capture.display_sink.stream is None


async def test_context_manager_releases_on_exit():
    camera = FakeCamera()
    async with make_capture(camera=camera) as capture:
        await capture.acquire_video()

    assert camera.streams[0].stopped


async def test_capture_records_are_pydantic_models():
    capture = make_capture()
    handle = await capture.start_audio_capture()

    for record in (capture.state, CaptureResult(ready=True), handle):
        assert isinstance(record, BaseModel)
    assert isinstance(capture.state, CaptureState)
    assert isinstance(handle, RecordingHandle)
    assert "track" not in repr(handle)
    assert capture.state.model_dump(exclude={"video_stream"})["is_recording"] is True
