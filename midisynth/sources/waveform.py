"""Formula-driven oscillator source."""
import logging
from typing import Optional

from ..expression import EvalError, Expression, evaluate, parse
from ..utils import Params
from .base import SignalSource

logger = logging.getLogger(__name__)


class Waveform(SignalSource):
    """
    Oscillator defined by a formula over the parameter context.

    The formula is parsed once, at construction. As a carrier it yields
    the raw formula value; as a modulator it remaps an assumed [-1, 1]
    waveform into [0, 1].

    Usage:
        saw = Waveform("saw", "(x % 1) * 2 - 1")
        saw.carrier_sample({"x": 0.25})  # -0.5
    """

    kind = "waveform"

    def __init__(self, name: str, equation: str):
        """
        Args:
            name: Waveform name from the arrangement
            equation: Formula text

        Raises:
            ParseError: If the formula cannot be parsed
        """
        super().__init__(name)
        self.equation = equation
        self.expression: Expression = parse(equation)

    def evaluate(self, params: Params) -> Optional[float]:
        try:
            return evaluate(self.expression, params)
        except EvalError as e:
            logger.debug(f"Waveform '{self.name}' could not be evaluated: {e}")
            return None

    def carrier_sample(self, params: Params) -> Optional[float]:
        return self.evaluate(params)

    def mod_sample(self, params: Params) -> Optional[float]:
        value = self.evaluate(params)
        if value is None:
            return None
        return (value + 1.0) / 2.0
