"""
Utility functions and constants for the synthesis engine.

Provides:
- Audio constants (sample rate, PCM range)
- MIDI pitch / frequency conversions
- Parameter context construction for per-sample evaluation
- The package-wide base exception
"""

from typing import Dict


# =============================================================================
# AUDIO CONSTANTS
# =============================================================================

SAMPLE_RATE = 44100  # Hz - default rate when the arrangement does not set one
INT16_MAX = 32767    # Largest positive 16-bit PCM value
FLOAT32_MAX = 3.4028234663852886e38  # Largest finite value a mix buffer can hold

# Equal temperament reference
A4_MIDI_NOTE = 69
A4_FREQUENCY = 440.0

MIDI_PITCH_MIN = 0
MIDI_PITCH_MAX = 127


# Parameter context keys
PARAM_DURATION = "duration"
PARAM_SAMPLE = "sample"
PARAM_TIME = "time"
PARAM_RATE = "rate"
PARAM_MIDI_NOTE = "midi_note"
PARAM_X = "x"


Params = Dict[str, float]


class MidisynthError(Exception):
    """Base class for every error raised by midisynth."""
    pass


# =============================================================================
# PITCH HELPERS
# =============================================================================

def midi_to_freq(midi_note: float) -> float:
    """Equal-tempered frequency of a MIDI pitch (A4 = 440 Hz)."""
    return A4_FREQUENCY * (2.0 ** ((midi_note - A4_MIDI_NOTE) / 12.0))


def pitch_ratio(target_note: float, source_note: float) -> float:
    """Frequency ratio between two MIDI pitches (exact for whole octaves)."""
    return 2.0 ** ((target_note - source_note) / 12.0)


def is_valid_pitch(midi_note: int) -> bool:
    return MIDI_PITCH_MIN <= midi_note <= MIDI_PITCH_MAX


# =============================================================================
# PARAMETER CONTEXTS
# =============================================================================

def build_params(
    sample: int,
    duration: int,
    midi_note: int,
    freq: float,
    sample_rate: int = SAMPLE_RATE
) -> Params:
    """
    Build the parameter context for one sample of one note.

    Args:
        sample: Sample index within the note (0-based)
        duration: Note length in samples
        midi_note: MIDI pitch of the note
        freq: Note frequency in Hz
        sample_rate: Output sample rate

    Returns:
        Dict of named values visible to waveform formulas and envelopes
    """
    rate = float(sample_rate)
    return {
        PARAM_DURATION: float(duration),
        PARAM_SAMPLE: float(sample),
        PARAM_TIME: sample / rate,
        PARAM_RATE: rate,
        PARAM_MIDI_NOTE: float(midi_note),
        PARAM_X: sample * freq / rate,
    }


def build_prime_params(midi_note: int) -> Params:
    """Context used to prime an instrument before a note is played."""
    return {PARAM_MIDI_NOTE: float(midi_note)}
