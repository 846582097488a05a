"""
Unit tests for MIDI reading
"""

import pytest
from pathlib import Path

import mido

from midisynth.midi_reader import (
    MidiReadError,
    Note,
    notes_from_messages,
    read_notes,
    seconds_to_samples,
)


class TestNote:
    """Tests for the Note record."""

    def test_duration(self):
        assert Note(0, 0, 100, 350, 60).duration == 250

    def test_freq(self):
        assert Note(0, 0, 0, 1, 69).freq == pytest.approx(440.0)
        assert Note(0, 0, 0, 1, 57).freq == pytest.approx(220.0)


class TestSecondsToSamples:

    def test_conversion(self):
        assert seconds_to_samples(0.5, 44100) == 22050
        assert seconds_to_samples(1.0, 8000) == 8000

    def test_float_drift(self):
        assert seconds_to_samples(0.49999999999, 44100) == 22050


class TestNotesFromMessages:
    """Tests for notes_from_messages() with seconds-based deltas."""

    def test_single_note(self):
        notes = notes_from_messages([
            mido.Message('program_change', channel=2, program=7, time=0),
            mido.Message('note_on', channel=2, note=64, velocity=90, time=0.25),
            mido.Message('note_off', channel=2, note=64, velocity=0, time=0.5),
        ], sample_rate=1000)
        assert notes == [Note(channel=2, program=7, start_time=250, end_time=750,
                              midi_note=64, velocity=90)]

    def test_default_program_is_zero(self):
        notes = notes_from_messages([
            mido.Message('note_on', note=60, velocity=100, time=0),
            mido.Message('note_off', note=60, time=1.0),
        ], sample_rate=100)
        assert notes[0].program == 0

    def test_zero_velocity_note_on_ends_note(self):
        notes = notes_from_messages([
            mido.Message('note_on', note=60, velocity=100, time=0),
            mido.Message('note_on', note=60, velocity=0, time=0.1),
        ], sample_rate=1000)
        assert len(notes) == 1
        assert notes[0].end_time == 100

    def test_program_captured_at_note_start(self):
        notes = notes_from_messages([
            mido.Message('program_change', program=1, time=0),
            mido.Message('note_on', note=60, velocity=100, time=0),
            mido.Message('program_change', program=2, time=0.1),
            mido.Message('note_off', note=60, time=0.1),
        ], sample_rate=1000)
        assert notes[0].program == 1

    def test_repeated_pitch_is_last_in_first_out(self):
        notes = notes_from_messages([
            mido.Message('note_on', note=60, velocity=100, time=0),
            mido.Message('note_on', note=60, velocity=100, time=1.0),
            mido.Message('note_off', note=60, time=1.0),
            mido.Message('note_off', note=60, time=1.0),
        ], sample_rate=10)
        assert [(n.start_time, n.end_time) for n in notes] == [(10, 20), (0, 30)]

    def test_channels_are_independent(self):
        notes = notes_from_messages([
            mido.Message('note_on', channel=0, note=60, velocity=100, time=0),
            mido.Message('note_on', channel=1, note=60, velocity=100, time=0),
            mido.Message('note_off', channel=1, note=60, time=1.0),
        ], sample_rate=10)
        assert len(notes) == 1
        assert notes[0].channel == 1

    def test_unmatched_note_off_skipped(self):
        notes = notes_from_messages([
            mido.Message('note_off', note=60, time=0),
            mido.Message('note_on', note=62, velocity=100, time=0),
            mido.Message('note_off', note=62, time=0.5),
        ], sample_rate=10)
        assert [n.midi_note for n in notes] == [62]

    def test_unreleased_notes_dropped(self):
        notes = notes_from_messages([
            mido.Message('note_on', note=60, velocity=100, time=0),
        ], sample_rate=10)
        assert notes == []

    def test_meta_messages_ignored(self):
        notes = notes_from_messages([
            mido.MetaMessage('track_name', name='lead', time=0),
            mido.Message('note_on', note=60, velocity=100, time=0),
            mido.Message('note_off', note=60, time=0.5),
        ], sample_rate=10)
        assert len(notes) == 1


class TestReadNotes:
    """Tests for read_notes() on real files."""

    def test_default_tempo(self, write_midi):
        path = write_midi("one.mid", [
            mido.Message('program_change', channel=0, program=5, time=0),
            mido.Message('note_on', note=60, velocity=100, time=0),
            mido.Message('note_off', note=60, velocity=0, time=480),
        ])
        notes = read_notes(path, 44100)
        assert notes == [Note(0, 5, 0, 22050, 60, 100)]

    def test_tempo_change(self, write_midi):
        path = write_midi("fast.mid", [
            mido.MetaMessage('set_tempo', tempo=250000, time=0),
            mido.Message('note_on', note=60, velocity=100, time=0),
            mido.Message('note_off', note=60, velocity=0, time=480),
        ])
        notes = read_notes(path, 44100)
        assert notes[0].end_time == 11025

    def test_demo_score(self, project_config_dir):
        notes = read_notes(str(project_config_dir / 'demo.mid'), 44100)
        assert len(notes) == 3
        bass = [n for n in notes if n.channel == 1]
        assert bass == [Note(1, 33, 0, 44100, 36, 64)]
        lead = sorted((n.start_time, n.end_time, n.midi_note) for n in notes if n.channel == 0)
        assert lead == [(0, 22050, 60), (22050, 44100, 64)]

    def test_missing_file(self, temp_dir):
        with pytest.raises(MidiReadError):
            read_notes(str(Path(temp_dir) / 'missing.mid'))

    def test_not_a_midi_file(self, temp_dir):
        path = Path(temp_dir) / 'garbage.mid'
        path.write_bytes(b'this is not a midi file')
        with pytest.raises(MidiReadError):
            read_notes(str(path))
