"""Audio capture, segmentation and WAV assembly."""

from .buffer import PreRollRingBuffer, pre_roll_capacity
from .session import CaptureSession
from .timers import CancellableTimer
from .vad import EnergyVAD
from .wav import WavAssembler, build_wav_header

__all__ = [
    'PreRollRingBuffer',
    'pre_roll_capacity',
    'CaptureSession',
    'CancellableTimer',
    'EnergyVAD',
    'WavAssembler',
    'build_wav_header',
]
