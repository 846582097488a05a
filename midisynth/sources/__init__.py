"""
Signal Source Package

Provides the sources an instrument is built from and the instrument
composition itself.

Usage:
    from midisynth.sources import (
        Waveform,
        Envelope,
        EnvPhase,
        Instrument,
        Modulator,
    )

    sine = Waveform("sine", "sin(x)")
    fade = Envelope("fade", [EnvPhase(0.0, 1.0, 0.0, 1.0, "SineIn")])
    lead = Instrument("lead", program=0, carrier=sine,
                      modulators=[Modulator(fade, depth=1.0)])
"""

from .base import SignalSource
from .envelope import Envelope, EnvPhase
from .factory import SourceFactory
from .instrument import Instrument, Modulator
from .sample_bank import PitchCache, SampleBank, resample_nearest
from .waveform import Waveform

__all__ = [
    # Base interface
    'SignalSource',
    # Factory
    'SourceFactory',
    # Implementations
    'Waveform',
    'Envelope',
    'EnvPhase',
    'SampleBank',
    'PitchCache',
    'resample_nearest',
    # Composition
    'Instrument',
    'Modulator',
]
