#!/usr/bin/env python3
"""
midisynth - CLI Entry Point

Render a MIDI file to WAV through the instruments of an arrangement.

Usage:
    python main.py arrangement.json
    python main.py arrangement.yaml --midi song.mid --output-dir ./renders
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from midisynth.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
