"""
Audio Renderer Module

Renders a note list through an arrangement's instruments, one mono
buffer per output bus.

Per bus:
1. INIT - zero buffer sized to the last sample of the notes routed to it
2. ACCUMULATE - every routed note is primed, evaluated sample by sample
   and summed into the buffer while the running peak is tracked
3. NORMALIZE - the buffer is scaled by the peak into 16-bit PCM
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .audio_io import save_wav
from .config_loader import Arrangement, OutputBus
from .midi_reader import Note
from .sources import Instrument
from .utils import (
    FLOAT32_MAX,
    INT16_MAX,
    MidisynthError,
    build_params,
    build_prime_params,
)

logger = logging.getLogger(__name__)


class MissingInstrumentError(MidisynthError):
    """Raised when a note's program is not mapped to any instrument."""

    def __init__(self, program: int):
        super().__init__(f"Could not find an instrument mapped to MIDI patch {program}")
        self.program = program


@dataclass
class BusRender:
    """Result of rendering one output bus."""
    bus: OutputBus
    pcm: np.ndarray
    peak: float
    notes_rendered: int = 0
    notes_skipped: int = 0


def normalize_to_pcm(buffer: np.ndarray, peak: float) -> np.ndarray:
    """
    Scale a float buffer by its peak into int16, truncating toward zero.

    A silent buffer (peak 0) stays silent. Non-finite slots or a non-finite
    peak never reach the int16 cast: NaN becomes 0 and the result is clipped
    to the PCM range.
    """
    if not peak > 0.0:
        return np.zeros(len(buffer), dtype=np.int16)
    with np.errstate(invalid='ignore', over='ignore'):
        scaled = buffer.astype(np.float64) / peak * INT16_MAX
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=INT16_MAX, neginf=-INT16_MAX)
    return np.trunc(np.clip(scaled, -INT16_MAX, INT16_MAX)).astype(np.int16)


class AudioRenderer:
    """
    Sample-accurate renderer for an arrangement.

    Usage:
        arrangement = ConfigLoader().load("song.json")
        renderer = AudioRenderer(arrangement)
        pcm_by_bus = renderer.render_all(read_notes("song.mid"))
    """

    def __init__(
        self,
        arrangement: Arrangement,
        sample_rate: Optional[int] = None,
        strict: Optional[bool] = None,
    ):
        """
        Args:
            arrangement: Resolved instruments and output buses
            sample_rate: Overrides the arrangement's sample rate
            strict: Overrides the arrangement's missing-instrument policy
        """
        self.arrangement = arrangement
        self.sample_rate = sample_rate if sample_rate is not None else arrangement.render.sample_rate
        self.strict = strict if strict is not None else arrangement.render.strict

    def resolve_instrument(self, program: int) -> Optional[Instrument]:
        return self.arrangement.find_instrument(program)

    def render_note(self, instrument: Instrument, note: Note) -> np.ndarray:
        """
        Evaluate one note sample by sample.

        Returns:
            float32 array of length ``note.duration``; instants where the
            instrument produced no value are silent
        """
        instrument.prime(build_prime_params(note.midi_note))

        duration = note.duration
        freq = note.freq
        out = np.zeros(max(duration, 0), dtype=np.float32)
        for s in range(duration):
            params = build_params(s, duration, note.midi_note, freq, self.sample_rate)
            value = instrument.get_sample(params)
            if value is not None:
                out[s] = value
        return out

    def render_bus(self, notes: Sequence[Note], bus: OutputBus) -> BusRender:
        """
        Render every note routed to ``bus`` and normalize the mix.

        Raises:
            MissingInstrumentError: In strict mode, for an unmapped program
        """
        routed = [n for n in notes if bus.routes(n.channel)]
        length = max((n.end_time for n in routed), default=0)
        buffer = np.zeros(length, dtype=np.float32)
        peak = 0.0
        rendered = skipped = 0

        for note in routed:
            instrument = self.resolve_instrument(note.program)
            if instrument is None:
                if self.strict:
                    raise MissingInstrumentError(note.program)
                logger.warning(
                    f"Skipping note {note.midi_note} at sample {note.start_time}: "
                    f"no instrument mapped to MIDI patch {note.program}"
                )
                skipped += 1
                continue

            if note.duration <= 0:
                continue

            audio = self.render_note(instrument, note)
            region = buffer[note.start_time:note.end_time]
            with np.errstate(over='ignore'):
                region += audio
            # Mixing saturates at the float32 range instead of overflowing to inf
            np.clip(region, -FLOAT32_MAX, FLOAT32_MAX, out=region)
            # Each slot of the region is touched once per note, so this equals
            # a per-sample running peak
            peak = max(peak, float(np.max(np.abs(region))))
            rendered += 1

        logger.info(
            f"Rendered bus '{bus.name}': {rendered} notes, {skipped} skipped, "
            f"{length} samples, peak {peak:.4f}"
        )
        return BusRender(
            bus=bus,
            pcm=normalize_to_pcm(buffer, peak),
            peak=peak,
            notes_rendered=rendered,
            notes_skipped=skipped,
        )

    def render_all(self, notes: Sequence[Note]) -> Dict[str, np.ndarray]:
        """
        Render every configured output bus.

        Returns:
            Mapping of bus name to int16 PCM samples
        """
        return {
            bus.name: self.render_bus(notes, bus).pcm
            for bus in self.arrangement.outputs
        }

    def render_to_files(
        self,
        notes: Sequence[Note],
        output_dir: Optional[str] = None
    ) -> List[str]:
        """
        Render every bus and write each to its configured WAV file.

        Args:
            notes: Notes to render
            output_dir: Directory for relative output paths (default: cwd)

        Returns:
            Paths of the written files
        """
        written = []
        for bus in self.arrangement.outputs:
            result = self.render_bus(notes, bus)
            path = bus.output_file
            if output_dir and not os.path.isabs(path):
                path = os.path.join(output_dir, path)
            save_wav(result.pcm, path, self.sample_rate)
            logger.info(f"Wrote {path}")
            written.append(path)
        return written
