"""
MIDI Reader

Converts a Standard MIDI File into the chronological note list consumed
by the renderer. Timing follows tempo changes and is expressed in output
samples; each note carries the program active on its channel when it
started.

Percussion is never inferred from channel 10 here - that is decided by
the arrangement's instrument mapping.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

import mido

from .utils import SAMPLE_RATE, MidisynthError, midi_to_freq

logger = logging.getLogger(__name__)


class MidiReadError(MidisynthError):
    """Raised when a MIDI file cannot be read."""
    pass


@dataclass(frozen=True)
class Note:
    """
    A finished note, timed in output samples.

    Attributes:
        channel: MIDI channel (0-15)
        program: Program number active when the note started
        start_time: First sample of the note
        end_time: Sample at which the note stops (exclusive)
        midi_note: MIDI pitch (0-127)
        velocity: Note-on velocity (1-127)
    """
    channel: int
    program: int
    start_time: int
    end_time: int
    midi_note: int
    velocity: int = 100

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def freq(self) -> float:
        return midi_to_freq(self.midi_note)


@dataclass
class _PlayingNote:
    program: int
    velocity: int
    start_time: int


def seconds_to_samples(seconds: float, sample_rate: int = SAMPLE_RATE) -> int:
    # Nearest sample; accumulated float seconds drift just under tick boundaries
    return int(round(seconds * sample_rate))


def read_notes(midi_path: str, sample_rate: int = SAMPLE_RATE) -> List[Note]:
    """
    Read every note from a MIDI file.

    Args:
        midi_path: Path to a .mid file
        sample_rate: Output sample rate used to convert times

    Returns:
        Notes in the order they finished

    Raises:
        MidiReadError: If the file cannot be opened or parsed
    """
    try:
        midi = mido.MidiFile(midi_path)
    except (OSError, EOFError, ValueError, KeyError) as e:
        raise MidiReadError(f"Failed to read MIDI file {midi_path}: {e}") from e

    return notes_from_messages(midi, sample_rate)


def notes_from_messages(messages, sample_rate: int = SAMPLE_RATE) -> List[Note]:
    """
    Build notes from messages whose ``time`` is a delta in seconds.

    Iterating a ``mido.MidiFile`` yields exactly that: tracks merged and
    tempo changes applied.
    """
    current_seconds = 0.0
    programs: Dict[int, int] = {}
    playing: Dict[Tuple[int, int], List[_PlayingNote]] = {}
    finished: List[Note] = []

    for msg in messages:
        current_seconds += msg.time
        now = seconds_to_samples(current_seconds, sample_rate)

        if msg.type == 'program_change':
            programs[msg.channel] = msg.program

        elif msg.type == 'note_on' and msg.velocity > 0:
            key = (msg.channel, msg.note)
            playing.setdefault(key, []).append(_PlayingNote(
                program=programs.get(msg.channel, 0),
                velocity=msg.velocity,
                start_time=now,
            ))

        elif msg.type == 'note_off' or (msg.type == 'note_on' and msg.velocity == 0):
            key = (msg.channel, msg.note)
            stack = playing.get(key)
            if not stack:
                logger.warning(
                    f"Note off for pitch {msg.note} on channel {msg.channel} "
                    f"with no matching note on - skipping"
                )
                continue
            started = stack.pop()
            finished.append(Note(
                channel=msg.channel,
                program=started.program,
                start_time=started.start_time,
                end_time=now,
                midi_note=msg.note,
                velocity=started.velocity,
            ))

    dangling = sum(len(stack) for stack in playing.values())
    if dangling:
        logger.warning(f"{dangling} notes were never released and will not be rendered")

    logger.debug(f"Read {len(finished)} notes")
    return finished
