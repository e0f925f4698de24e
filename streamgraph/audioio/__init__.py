"""Audio input for running graphs on WAV files.

Example:
    >>> from streamgraph.audioio import load_wav
    >>> samples, sr = load_wav("speech.wav")
    >>> samples.shape[1]  # channels
    1
"""

from .errors import AudioDecodeError, AudioIOError
from .loader import load_wav, load_wav_bytes


__all__ = [
    # Loading
    "load_wav",
    "load_wav_bytes",
    # Errors
    "AudioIOError",
    "AudioDecodeError",
]
