"""
midisynth

Renders MIDI scores to mono audio through declaratively configured
instruments: formula oscillators and recorded-sample banks, shaped by
waveform and eased-envelope amplitude modulators.
"""

__version__ = "0.1.0"

from .expression import (
    ErrorKind,
    EvalError,
    ParseError,
    evaluate,
    parse,
)
from .easing import EASING_FUNCTIONS, get_easing
from .sources import (
    SignalSource,
    SourceFactory,
    Waveform,
    Envelope,
    EnvPhase,
    SampleBank,
    PitchCache,
    Instrument,
    Modulator,
)
from .midi_reader import Note, MidiReadError, read_notes
from .config_loader import (
    Arrangement,
    ConfigLoader,
    ConfigLoadError,
    OutputBus,
    RenderConfig,
    load_arrangement,
)
from .renderer import (
    AudioRenderer,
    BusRender,
    MissingInstrumentError,
    normalize_to_pcm,
)
from .audio_io import AudioIOError, load_clip, save_wav
from .utils import (
    SAMPLE_RATE,
    MidisynthError,
    build_params,
    midi_to_freq,
)

__all__ = [
    # Expressions
    'ErrorKind',
    'EvalError',
    'ParseError',
    'evaluate',
    'parse',
    # Easing
    'EASING_FUNCTIONS',
    'get_easing',
    # Sources
    'SignalSource',
    'SourceFactory',
    'Waveform',
    'Envelope',
    'EnvPhase',
    'SampleBank',
    'PitchCache',
    'Instrument',
    'Modulator',
    # MIDI
    'Note',
    'MidiReadError',
    'read_notes',
    # Configuration
    'Arrangement',
    'ConfigLoader',
    'ConfigLoadError',
    'OutputBus',
    'RenderConfig',
    'load_arrangement',
    # Rendering
    'AudioRenderer',
    'BusRender',
    'MissingInstrumentError',
    'normalize_to_pcm',
    # Audio I/O
    'AudioIOError',
    'load_clip',
    'save_wav',
    # Utils
    'SAMPLE_RATE',
    'MidisynthError',
    'build_params',
    'midi_to_freq',
]
