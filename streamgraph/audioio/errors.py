"""Custom exceptions for audio I/O operations."""

from streamgraph.errors import StreamGraphError


class AudioIOError(StreamGraphError):
    """Base exception for all audio I/O errors."""
    pass


class AudioDecodeError(AudioIOError):
    """Raised when audio decoding fails.
    
    Common codes:
        - INVALID_WAV: File is not a valid WAV or cannot be decoded.
        - FILE_NOT_FOUND: Audio file does not exist.
        - EMPTY_FILE: File has zero bytes.
        - EMPTY_AUDIO: File decodes to zero samples.
    """
    pass
