"""Instrument: a carrier source shaped by amplitude modulators."""
import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..utils import FLOAT32_MAX, Params
from .base import SignalSource


@dataclass(frozen=True)
class Modulator:
    """A modulating source and how strongly it attenuates the carrier."""
    source: SignalSource
    depth: float = 1.0


@dataclass
class Instrument:
    """
    Carrier source combined with an ordered list of modulators.

    Each modulator that produces a value ``m`` scales the carrier by
    ``1 - m * depth``; a modulator with no value at an instant leaves the
    carrier untouched.

    Attributes:
        name: Instrument name from the arrangement
        program: MIDI program number this instrument plays
        percussion: Whether the instrument is mapped as percussion
        carrier: Audible source
        modulators: Amplitude modulators, in configuration order
    """
    name: str
    program: int
    carrier: SignalSource
    percussion: bool = False
    modulators: List[Modulator] = field(default_factory=list)

    def prime(self, params: Params) -> None:
        # Modulators are not primed
        self.carrier.prime(params)

    def get_sample(self, params: Params) -> Optional[float]:
        """
        Combined carrier sample at one instant.

        Returns:
            The modulated amplitude, or None if the carrier produced no
            value or the result is not a finite float32
        """
        value = self.carrier.carrier_sample(params)
        if value is None:
            return None

        for modulator in self.modulators:
            m = modulator.source.mod_sample(params)
            if m is not None:
                value *= 1.0 - m * modulator.depth

        # The renderer mixes in float32
        if not math.isfinite(value) or abs(value) > FLOAT32_MAX:
            return None
        return value

    def matches(self, program: int) -> bool:
        return not self.percussion and self.program == program
