"""Recorded per-pitch sample source with nearest-neighbour pitch shifting."""
import logging
from collections import OrderedDict
from typing import Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

import numpy as np

from ..audio_io import load_clip
from ..utils import (
    MIDI_PITCH_MAX,
    PARAM_MIDI_NOTE,
    PARAM_SAMPLE,
    Params,
    is_valid_pitch,
    pitch_ratio,
)
from .base import SignalSource

logger = logging.getLogger(__name__)

ClipLoader = Callable[[str], np.ndarray]

# Farthest semitone distance searched for a substitute clip
MAX_SEARCH_DISTANCE = MIDI_PITCH_MAX


def resample_nearest(snd: np.ndarray, ratio: float) -> np.ndarray:
    """
    Naive nearest-neighbour resampling by a frequency ratio.

    Output index ``i`` reads source location ``i * ratio``, rounding to
    the closer of its two neighbours (ties go up). Locations past the end
    of the source produce silence. The output is one sample shorter than
    the source.

    Args:
        snd: Source buffer
        ratio: Target frequency / source frequency

    Returns:
        float32 buffer of length ``len(snd) - 1``
    """
    length = len(snd) - 1
    if length <= 0:
        return np.zeros(0, dtype=np.float32)

    loc = np.arange(length, dtype=np.float64) * ratio
    loc_floor = np.floor(loc)
    in_range = loc <= length - 1

    idx = loc_floor.astype(np.int64) + ((loc - loc_floor) >= 0.5)
    idx = np.where(in_range, idx, 0)

    out = np.where(in_range, snd[idx], 0.0)
    return out.astype(np.float32)


def search_order(midi_note: int, max_distance: int = MAX_SEARCH_DISTANCE) -> Iterator[int]:
    """Yield valid pitches at increasing distance: +1, -1, +2, -2, ..."""
    for distance in range(1, max_distance + 1):
        for candidate in (midi_note + distance, midi_note - distance):
            if is_valid_pitch(candidate):
                yield candidate


class PitchCache:
    """
    Pitch-keyed buffer cache with an optional LRU size cap.

    With ``max_entries=None`` (the default) nothing is ever evicted.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries
        self._entries: "OrderedDict[int, np.ndarray]" = OrderedDict()

    def __contains__(self, midi_note: int) -> bool:
        return midi_note in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, midi_note: int) -> Optional[np.ndarray]:
        buffer = self._entries.get(midi_note)
        if buffer is not None:
            self._entries.move_to_end(midi_note)
        return buffer

    def put(self, midi_note: int, buffer: np.ndarray) -> None:
        self._entries[midi_note] = buffer
        self._entries.move_to_end(midi_note)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted pitch {evicted} from sample cache")

    def keys(self):
        return self._entries.keys()

    def clear(self) -> None:
        self._entries.clear()


class SampleBank(SignalSource):
    """
    Bank of recorded single-pitch clips.

    Clips are decoded lazily by ``prime`` and kept in a per-bank
    ``PitchCache``. A pitch without its own clip is synthesized from the
    nearest registered pitch by resampling. Playback past the end of a
    clip is silence.

    Usage:
        bank = SampleBank("piano", {"60": "piano_c4.wav"})
        bank.prime({"midi_note": 62})        # resampled from 60
        bank.carrier_sample({"midi_note": 62, "sample": 0})
    """

    kind = "sample_bank"

    def __init__(
        self,
        name: str,
        files: Mapping[Union[str, int], str],
        loader: Optional[ClipLoader] = None,
        cache: Optional[PitchCache] = None,
    ):
        """
        Args:
            name: Bank name from the arrangement
            files: Mapping of MIDI pitch (as int or numeric string) to clip path
            loader: Clip decoder, defaults to ``audio_io.load_clip``
            cache: Buffer cache, defaults to an unbounded ``PitchCache``

        Raises:
            ValueError: If a pitch key is not an integer
        """
        super().__init__(name)
        self.files: Dict[int, str] = {
            self._pitch_key(pitch): path for pitch, path in files.items()
        }
        self.loader: ClipLoader = loader or load_clip
        self.cache = cache if cache is not None else PitchCache()

    @staticmethod
    def _pitch_key(pitch: Union[str, int, float]) -> int:
        value = float(pitch)
        if not value.is_integer():
            raise ValueError(f"Sample bank pitch must be an integer, got {pitch!r}")
        return int(value)

    def find_nearest(self, midi_note: int) -> Optional[int]:
        """Closest registered pitch to ``midi_note`` (excluding itself), or None."""
        for candidate in search_order(midi_note):
            if candidate in self.files:
                return candidate
        return None

    def buffer_for(self, midi_note: int) -> Optional[np.ndarray]:
        return self.cache.get(midi_note)

    def prime(self, params: Params) -> None:
        midi_note = int(params[PARAM_MIDI_NOTE])
        if midi_note in self.cache:
            return

        if midi_note in self.files:
            self.cache.put(midi_note, self.loader(self.files[midi_note]))
            logger.debug(f"Cached clip for pitch {midi_note} in bank '{self.name}'")
            return

        logger.warning(
            f"Bank '{self.name}' has no sample with MIDI pitch {midi_note} - attempting to resample"
        )
        nearest = self.find_nearest(midi_note)
        if nearest is None:
            logger.warning(f"Bank '{self.name}' has no clips to resample for pitch {midi_note}")
            return

        ratio = pitch_ratio(midi_note, nearest)
        source = self.loader(self.files[nearest])
        self.cache.put(midi_note, resample_nearest(source, ratio))
        logger.debug(
            f"Resampled pitch {nearest} -> {midi_note} (ratio {ratio:.4f}) in bank '{self.name}'"
        )

    def carrier_sample(self, params: Params) -> Optional[float]:
        buffer = self.cache.get(int(params[PARAM_MIDI_NOTE]))
        if buffer is None:
            return None
        sample = int(params[PARAM_SAMPLE])
        if sample < len(buffer):
            return float(buffer[sample])
        # The note outlasts the clip
        return 0.0

    def cached_pitches(self) -> Tuple[int, ...]:
        return tuple(sorted(self.cache.keys()))
