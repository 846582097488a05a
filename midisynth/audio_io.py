"""
Audio I/O

Thin adapters over soundfile for decoding recorded clips and writing
rendered buses as 16-bit mono WAV.
"""

import logging
import os

import numpy as np
import soundfile as sf

from .utils import SAMPLE_RATE, MidisynthError

logger = logging.getLogger(__name__)


class AudioIOError(MidisynthError):
    """Raised when an audio file cannot be read or written."""
    pass


def load_clip(path: str) -> np.ndarray:
    """
    Decode an audio clip into a mono float32 buffer.

    Multi-channel files are mixed down by averaging channels.

    Args:
        path: Path to an audio file readable by soundfile

    Returns:
        1-D float32 array of samples in [-1.0, 1.0]

    Raises:
        AudioIOError: If the file cannot be decoded
    """
    try:
        audio, sr = sf.read(path, dtype='float32', always_2d=False)
    except (RuntimeError, OSError) as e:
        raise AudioIOError(f"Failed to read audio clip {path}: {e}") from e

    if audio.ndim > 1:
        audio = np.mean(audio, axis=1, dtype=np.float32)

    logger.debug(f"Decoded {path}: {len(audio)} samples at {sr} Hz")
    return audio.astype(np.float32, copy=False)


def save_wav(
    pcm: np.ndarray,
    filepath: str,
    sample_rate: int = SAMPLE_RATE
) -> None:
    """
    Save rendered int16 PCM to a mono 16-bit WAV file.

    Creates the parent directory if needed.
    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    try:
        sf.write(filepath, np.asarray(pcm, dtype=np.int16), sample_rate, subtype='PCM_16')
    except (RuntimeError, OSError) as e:
        raise AudioIOError(f"Failed to write {filepath}: {e}") from e

    logger.debug(f"Wrote {len(pcm)} samples to {filepath}")
