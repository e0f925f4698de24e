"""WAV input in frame-block layout.

Decoded audio comes back as a float64 array with one row per sample and one
column per channel, so it can be pushed into a graph configured with
`width=channels` and `rate=sample_rate` without reshaping.
"""

import io
import logging
from pathlib import Path
from typing import Any, BinaryIO

import numpy as np
import soundfile as sf

from streamgraph.stream import FRAME_DTYPE

from .errors import AudioDecodeError


logger = logging.getLogger(__name__)


def load_wav(path: str | Path) -> tuple[np.ndarray, int]:
    """Read a WAV file as a frame block.

    Returns:
        (samples, sample_rate) with samples shaped (num_samples, channels).

    Raises:
        AudioDecodeError: FILE_NOT_FOUND, EMPTY_FILE, INVALID_WAV or
            EMPTY_AUDIO.

    Examples:
        >>> samples, sr = load_wav("speech.wav")
        >>> samples.shape
        (16000, 1)
    """
    path = Path(path)
    context = {"path": str(path)}

    if not path.is_file():
        raise AudioDecodeError(
            message=f"no audio file at {path}",
            code="FILE_NOT_FOUND",
            details=context,
        )
    if path.stat().st_size == 0:
        raise AudioDecodeError(
            message=f"audio file {path} has no content",
            code="EMPTY_FILE",
            details=context,
        )

    return _decode(str(path), context)


def load_wav_bytes(data: bytes) -> tuple[np.ndarray, int]:
    """Read an in-memory WAV payload as a frame block.

    Raises:
        AudioDecodeError: EMPTY_FILE, INVALID_WAV or EMPTY_AUDIO.
    """
    context = {"bytes_length": len(data)}
    if not data:
        raise AudioDecodeError(
            message="audio payload has no content",
            code="EMPTY_FILE",
            details=context,
        )

    return _decode(io.BytesIO(data), context)


def _decode(source: str | BinaryIO, context: dict[str, Any]) -> tuple[np.ndarray, int]:
    try:
        # always_2d keeps mono input as a single column
        block, sample_rate = sf.read(source, dtype="float64", always_2d=True)
    except (sf.SoundFileError, RuntimeError, TypeError, ValueError) as e:
        raise AudioDecodeError(
            message=f"cannot decode WAV data: {e}",
            code="INVALID_WAV",
            details={**context, "error": str(e)},
        ) from e

    num_samples, channels = block.shape
    if num_samples == 0:
        raise AudioDecodeError(
            message="WAV data holds no samples",
            code="EMPTY_AUDIO",
            details={**context, "channels": channels},
        )

    logger.debug("decoded wav samples=%d channels=%d rate=%d", num_samples, channels, sample_rate)
    return np.ascontiguousarray(block, dtype=FRAME_DTYPE), int(sample_rate)
