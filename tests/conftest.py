"""
Pytest fixtures for midisynth tests.
"""
import pytest
import sys
from pathlib import Path
import tempfile
import shutil

import mido
import numpy as np
import soundfile as sf

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def sample_rate():
    """Standard sample rate for tests."""
    return 44100


@pytest.fixture
def temp_dir():
    """Create temporary directory for test outputs."""
    tmp = tempfile.mkdtemp()
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def write_clip(temp_dir, sample_rate):
    """Factory writing a float WAV clip into the temp dir; returns its path."""
    def _write(name, samples, channels=1):
        path = str(Path(temp_dir) / name)
        data = np.asarray(samples, dtype=np.float32)
        if channels > 1:
            data = np.column_stack([data] * channels)
        sf.write(path, data, sample_rate, subtype='FLOAT')
        return path
    return _write


@pytest.fixture
def write_midi(temp_dir):
    """Factory writing a single-track MIDI file; message times are in ticks."""
    def _write(name, messages, ticks_per_beat=480):
        midi = mido.MidiFile(ticks_per_beat=ticks_per_beat)
        track = mido.MidiTrack()
        midi.tracks.append(track)
        for msg in messages:
            track.append(msg)
        path = str(Path(temp_dir) / name)
        midi.save(path)
        return path
    return _write


@pytest.fixture
def project_config_dir():
    """Get the configs/arrangements directory."""
    return PROJECT_ROOT / 'configs' / 'arrangements'
