"""
Easing Curves

Robert Penner's easing equations in their classic ``(t, b, c, d)`` form:

    t: elapsed frames within the segment
    b: starting value
    c: change in value over the segment
    d: segment length in frames

Every curve returns ``b`` at ``t == 0`` and ``b + c`` at ``t == d``.
Callers must not pass ``d == 0``; envelopes resolve zero-length segments
before reaching this module.
"""

import math
from typing import Callable, Dict


EaseFunction = Callable[[float, float, float, float], float]

BACK_OVERSHOOT = 1.70158
BACK_IN_OUT_SCALE = 1.525
ELASTIC_PERIOD = 0.3


# =============================================================================
# LINEAR
# =============================================================================

def linear(t: float, b: float, c: float, d: float) -> float:
    return b + c * t / d


# =============================================================================
# POWER CURVES
# =============================================================================

def quad_in(t, b, c, d):
    t /= d
    return c * t * t + b


def quad_out(t, b, c, d):
    t /= d
    return -c * t * (t - 2.0) + b


def quad_in_out(t, b, c, d):
    t /= d / 2.0
    if t < 1.0:
        return c / 2.0 * t * t + b
    t -= 1.0
    return -c / 2.0 * (t * (t - 2.0) - 1.0) + b


def cubic_in(t, b, c, d):
    t /= d
    return c * t ** 3 + b


def cubic_out(t, b, c, d):
    t = t / d - 1.0
    return c * (t ** 3 + 1.0) + b


def cubic_in_out(t, b, c, d):
    t /= d / 2.0
    if t < 1.0:
        return c / 2.0 * t ** 3 + b
    t -= 2.0
    return c / 2.0 * (t ** 3 + 2.0) + b


def quart_in(t, b, c, d):
    t /= d
    return c * t ** 4 + b


def quart_out(t, b, c, d):
    t = t / d - 1.0
    return -c * (t ** 4 - 1.0) + b


def quart_in_out(t, b, c, d):
    t /= d / 2.0
    if t < 1.0:
        return c / 2.0 * t ** 4 + b
    t -= 2.0
    return -c / 2.0 * (t ** 4 - 2.0) + b


def quint_in(t, b, c, d):
    t /= d
    return c * t ** 5 + b


def quint_out(t, b, c, d):
    t = t / d - 1.0
    return c * (t ** 5 + 1.0) + b


def quint_in_out(t, b, c, d):
    t /= d / 2.0
    if t < 1.0:
        return c / 2.0 * t ** 5 + b
    t -= 2.0
    return c / 2.0 * (t ** 5 + 2.0) + b


# =============================================================================
# TRIGONOMETRIC / CIRCULAR / EXPONENTIAL
# =============================================================================

def sine_in(t, b, c, d):
    return -c * math.cos(t / d * (math.pi / 2.0)) + c + b


def sine_out(t, b, c, d):
    return c * math.sin(t / d * (math.pi / 2.0)) + b


def sine_in_out(t, b, c, d):
    return -c / 2.0 * (math.cos(math.pi * t / d) - 1.0) + b


def circ_in(t, b, c, d):
    t /= d
    return -c * (math.sqrt(1.0 - t * t) - 1.0) + b


def circ_out(t, b, c, d):
    t = t / d - 1.0
    return c * math.sqrt(1.0 - t * t) + b


def circ_in_out(t, b, c, d):
    t /= d / 2.0
    if t < 1.0:
        return -c / 2.0 * (math.sqrt(1.0 - t * t) - 1.0) + b
    t -= 2.0
    return c / 2.0 * (math.sqrt(1.0 - t * t) + 1.0) + b


def expo_in(t, b, c, d):
    if t == 0.0:
        return b
    return c * 2.0 ** (10.0 * (t / d - 1.0)) + b


def expo_out(t, b, c, d):
    if t == d:
        return b + c
    return c * (-(2.0 ** (-10.0 * t / d)) + 1.0) + b


def expo_in_out(t, b, c, d):
    if t == 0.0:
        return b
    if t == d:
        return b + c
    t /= d / 2.0
    if t < 1.0:
        return c / 2.0 * 2.0 ** (10.0 * (t - 1.0)) + b
    return c / 2.0 * (-(2.0 ** (-10.0 * (t - 1.0))) + 2.0) + b


# =============================================================================
# OVERSHOOT / SPRING / BOUNCE
# =============================================================================

def back_in(t, b, c, d):
    s = BACK_OVERSHOOT
    t /= d
    return c * t * t * ((s + 1.0) * t - s) + b


def back_out(t, b, c, d):
    s = BACK_OVERSHOOT
    t = t / d - 1.0
    return c * (t * t * ((s + 1.0) * t + s) + 1.0) + b


def back_in_out(t, b, c, d):
    s = BACK_OVERSHOOT * BACK_IN_OUT_SCALE
    t /= d / 2.0
    if t < 1.0:
        return c / 2.0 * (t * t * ((s + 1.0) * t - s)) + b
    t -= 2.0
    return c / 2.0 * (t * t * ((s + 1.0) * t + s) + 2.0) + b


def elastic_in(t, b, c, d):
    if t == 0.0:
        return b
    t /= d
    if t == 1.0:
        return b + c
    p = d * ELASTIC_PERIOD
    s = p / 4.0
    t -= 1.0
    return -(c * 2.0 ** (10.0 * t) * math.sin((t * d - s) * (2.0 * math.pi) / p)) + b


def elastic_out(t, b, c, d):
    if t == 0.0:
        return b
    t /= d
    if t == 1.0:
        return b + c
    p = d * ELASTIC_PERIOD
    s = p / 4.0
    return c * 2.0 ** (-10.0 * t) * math.sin((t * d - s) * (2.0 * math.pi) / p) + c + b


def elastic_in_out(t, b, c, d):
    if t == 0.0:
        return b
    t /= d / 2.0
    if t == 2.0:
        return b + c
    p = d * (ELASTIC_PERIOD * 1.5)
    s = p / 4.0
    t -= 1.0
    if t < 0.0:
        return -0.5 * (c * 2.0 ** (10.0 * t) * math.sin((t * d - s) * (2.0 * math.pi) / p)) + b
    return c * 2.0 ** (-10.0 * t) * math.sin((t * d - s) * (2.0 * math.pi) / p) * 0.5 + c + b


def bounce_out(t, b, c, d):
    t /= d
    if t < 1.0 / 2.75:
        return c * (7.5625 * t * t) + b
    if t < 2.0 / 2.75:
        t -= 1.5 / 2.75
        return c * (7.5625 * t * t + 0.75) + b
    if t < 2.5 / 2.75:
        t -= 2.25 / 2.75
        return c * (7.5625 * t * t + 0.9375) + b
    t -= 2.625 / 2.75
    return c * (7.5625 * t * t + 0.984375) + b


def bounce_in(t, b, c, d):
    return c - bounce_out(d - t, 0.0, c, d) + b


def bounce_in_out(t, b, c, d):
    if t < d / 2.0:
        return bounce_in(t * 2.0, 0.0, c, d) * 0.5 + b
    return bounce_out(t * 2.0 - d, 0.0, c, d) * 0.5 + c * 0.5 + b


# =============================================================================
# CATALOG
# =============================================================================

EASING_FUNCTIONS: Dict[str, EaseFunction] = {
    "BackIn": back_in,
    "BackOut": back_out,
    "BackInOut": back_in_out,
    "BounceIn": bounce_in,
    "BounceOut": bounce_out,
    "BounceInOut": bounce_in_out,
    "CircIn": circ_in,
    "CircOut": circ_out,
    "CircInOut": circ_in_out,
    "CubicIn": cubic_in,
    "CubicOut": cubic_out,
    "CubicInOut": cubic_in_out,
    "ElasticIn": elastic_in,
    "ElasticOut": elastic_out,
    "ElasticInOut": elastic_in_out,
    "ExpoIn": expo_in,
    "ExpoOut": expo_out,
    "ExpoInOut": expo_in_out,
    "Linear": linear,
    "LinearIn": linear,
    "LinearOut": linear,
    "LinearInOut": linear,
    "QuadIn": quad_in,
    "QuadOut": quad_out,
    "QuadInOut": quad_in_out,
    "QuartIn": quart_in,
    "QuartOut": quart_out,
    "QuartInOut": quart_in_out,
    "QuintIn": quint_in,
    "QuintOut": quint_out,
    "QuintInOut": quint_in_out,
    "SineIn": sine_in,
    "SineOut": sine_out,
    "SineInOut": sine_in_out,
}


def get_easing(name: str) -> EaseFunction:
    """
    Look up an easing curve by its configuration name (e.g. ``"SineOut"``).

    Raises:
        ValueError: If the name is not in the catalog
    """
    try:
        return EASING_FUNCTIONS[name]
    except KeyError:
        raise ValueError(
            f"Unknown easing function '{name}'. "
            f"Available: {', '.join(sorted(EASING_FUNCTIONS))}"
        ) from None


def list_easings() -> list:
    return sorted(EASING_FUNCTIONS)
