"""Test fixtures for stream and audio tests.

This module provides utilities for generating in-memory WAV files and small
helper stages for testing. No binary files are committed - fixtures are
generated programmatically.
"""

import io

import numpy as np
import soundfile as sf

from streamgraph.stream import ParamKind, Stage, StreamDescriptor


def generate_sine_wav_bytes(
    frequency: float = 440.0,
    duration_sec: float = 1.0,
    sample_rate: int = 16000,
    amplitude: float = 0.5,
    channels: int = 1,
) -> bytes:
    """Generate a sine wave WAV file as bytes.
    
    Args:
        frequency: Sine wave frequency in Hz.
        duration_sec: Duration in seconds.
        sample_rate: Sample rate in Hz.
        amplitude: Amplitude (0.0 to 1.0).
        channels: Number of channels (1=mono, 2=stereo).
        
    Returns:
        WAV file as bytes.
    """
    num_samples = int(sample_rate * duration_sec)
    t = np.linspace(0, duration_sec, num_samples, dtype=np.float32)
    signal = (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)
    
    if channels > 1:
        signal = np.column_stack([signal] * channels)
    
    buffer = io.BytesIO()
    sf.write(buffer, signal, sample_rate, format="WAV", subtype="FLOAT")
    buffer.seek(0)
    return buffer.read()


def generate_ramp_wav_bytes(
    num_samples: int = 50,
    step: float = 0.01,
    sample_rate: int = 100,
) -> bytes:
    """Generate a WAV file holding a ramp 0, step, 2 * step, ...
    
    Args:
        num_samples: Number of samples.
        step: Increment between samples.
        sample_rate: Sample rate in Hz.
        
    Returns:
        WAV file as bytes (64-bit float samples, so values survive exactly).
    """
    signal = np.arange(num_samples, dtype=np.float64) * step
    
    buffer = io.BytesIO()
    sf.write(buffer, signal, sample_rate, format="WAV", subtype="DOUBLE")
    buffer.seek(0)
    return buffer.read()


class CollectingParent:
    """Diagnostics parent recording every signaled message."""
    
    def __init__(self) -> None:
        self.errors: list[tuple[str, str]] = []
        self.warnings: list[tuple[str, str]] = []
    
    def signal_error(self, stage: Stage, message: str) -> None:
        self.errors.append((stage.instance_name, message))
    
    def signal_warning(self, stage: Stage, message: str) -> None:
        self.warnings.append((stage.instance_name, message))


class MutatingStage(Stage):
    """Stage that overwrites its input block in place before passing it on."""
    
    name = "mutate"
    
    def on_frames(self, time, weight, values):
        values[...] = -1.0
        self.propagate_frames(time, weight, values)


class SpyStage(Stage):
    """Stage recording what it receives and passing it through."""
    
    name = "spy"
    
    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("gain", ParamKind.FLOAT, 1.0, "Unused gain", reconfigure=True)
        self.descriptors: list[StreamDescriptor] = []
        self.blocks: list[np.ndarray] = []
        self.calls: list[str] = []
        self.closed = False
    
    def on_configure(self, descriptor):
        self.descriptors.append(descriptor)
        self.calls.append("configure")
        return self.propagate_stream(descriptor)
    
    def on_frames(self, time, weight, values):
        self.blocks.append(values.copy())
        self.calls.append("frames")
        self.propagate_frames(time, weight, values)
    
    def on_reset(self):
        self.calls.append("reset")
        self.propagate_reset()
    
    def on_finalize(self, end_time):
        self.calls.append("finalize")
        self.propagate_finalize(end_time)
    
    def on_segment(self, time, is_start):
        self.calls.append("segment")
        self.propagate_segment(time, is_start)
    
    def close(self):
        self.closed = True
        super().close()


class RejectingStage(Stage):
    """Stage rejecting every stream with more than `maxwidth` columns."""
    
    name = "reject"
    
    def __init__(self, parent=None, receiver=None) -> None:
        super().__init__(parent=parent, receiver=receiver)
        self.params.declare("maxwidth", ParamKind.INT, 1, "Widest accepted stream", reconfigure=True)
    
    def on_configure(self, descriptor):
        if descriptor.width > self.params["maxwidth"]:
            self.reject(f"width {descriptor.width} above {self.params['maxwidth']}")
        return self.propagate_stream(descriptor)
