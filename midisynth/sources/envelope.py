"""Keyframe envelope source built on the easing catalog."""
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..easing import EaseFunction, get_easing
from ..utils import PARAM_DURATION, PARAM_SAMPLE, Params
from .base import SignalSource


@dataclass(frozen=True)
class EnvPhase:
    """
    One eased segment of an envelope.

    Attributes:
        start_time: Segment start as a fraction of the note duration
        end_time: Segment end as a fraction of the note duration
        start_val: Value at the start of the segment
        delta_val: Change in value across the segment
        ease_fn: Easing curve name (see ``easing.EASING_FUNCTIONS``)
    """
    start_time: float
    end_time: float
    start_val: float
    delta_val: float
    ease_fn: str = "Linear"

    @property
    def end_val(self) -> float:
        return self.start_val + self.delta_val

    def window(self, duration: float) -> Tuple[int, int]:
        """Absolute (start, end) sample indices of this phase for a note."""
        start = max(0, int(self.start_time * duration))
        end = max(0, int(self.end_time * duration))
        return start, end


class Envelope(SignalSource):
    """
    Piecewise eased envelope, evaluated against elapsed note time.

    Phases are scanned in order; when several windows contain the
    current sample the last one wins. The eased value is inverted before
    it is returned, so it reads as "how much to attenuate" when scaled by
    a modulator depth. Envelopes have no carrier behaviour.

    Usage:
        fade_out = Envelope("fade", [EnvPhase(0.0, 1.0, 0.0, 1.0, "Linear")])
        fade_out.mod_sample({"duration": 100, "sample": 0})  # 1.0
    """

    kind = "envelope"

    def __init__(self, name: str, phases: Iterable[EnvPhase]):
        """
        Raises:
            ValueError: If a phase names an unknown easing curve
        """
        super().__init__(name)
        self.phases: Tuple[EnvPhase, ...] = tuple(phases)
        self._curves: Tuple[EaseFunction, ...] = tuple(
            get_easing(phase.ease_fn) for phase in self.phases
        )

    def value_at(self, sample: int, duration: float) -> Optional[float]:
        """Eased (non-inverted) value at ``sample``, or None outside all phases."""
        value = None
        for phase, curve in zip(self.phases, self._curves):
            start, end = phase.window(duration)
            if start <= sample <= end:
                length = end - start
                if length == 0:
                    value = phase.end_val
                else:
                    value = curve(float(sample - start), phase.start_val,
                                  phase.delta_val, float(length))
        return value

    def mod_sample(self, params: Params) -> Optional[float]:
        value = self.value_at(int(params[PARAM_SAMPLE]), params[PARAM_DURATION])
        if value is None:
            return None
        return 1.0 - value
