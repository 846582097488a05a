"""Abstract interface for signal sources."""
from abc import ABC
from typing import Optional

from ..utils import Params


class SignalSource(ABC):
    """
    Abstract interface for anything that can feed an instrument.

    A source may act as a carrier (audible signal), as a modulator
    (attenuation in [0, 1]), or both. Each implementation overrides only
    the capabilities it supports; the defaults report "no value" so the
    caller can treat an unsupported capability as silence or a no-op.

    Capabilities:
    - carrier_sample: Raw amplitude at one instant
    - mod_sample: Normalized modulation value at one instant
    - prime: One-time, idempotent preparation before a note is played

    Implementations:
    - Waveform: Formula-driven oscillator (carrier and modulator)
    - Envelope: Eased keyframe phases (modulator only)
    - SampleBank: Recorded per-pitch clips (carrier only)
    """

    #: Short name used by the source factory and in log messages
    kind: str = "source"

    def __init__(self, name: str = ""):
        self.name = name

    def prime(self, params: Params) -> None:
        """Prepare any cached data needed for the note described by ``params``."""
        return None

    def carrier_sample(self, params: Params) -> Optional[float]:
        """Return the audible amplitude at this instant, or None."""
        return None

    def mod_sample(self, params: Params) -> Optional[float]:
        """Return a modulation value in [0, 1] at this instant, or None."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
