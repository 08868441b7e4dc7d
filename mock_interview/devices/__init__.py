from .camera import OpenCVCamera, CameraStream, TerminalPreview
from .microphone import PyAudioMicrophone, MicrophoneTrack


__all__ = [
    'OpenCVCamera',
    'CameraStream',
    'TerminalPreview',
    'PyAudioMicrophone',
    'MicrophoneTrack',
]
