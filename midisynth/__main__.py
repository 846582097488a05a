"""
Command line entry point.

Usage:
    python -m midisynth arrangement.json
    python -m midisynth arrangement.yaml --midi song.mid --output-dir ./renders
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from colorama import Fore, Style, init

from .config_loader import ConfigLoader
from .midi_reader import read_notes
from .renderer import AudioRenderer
from .utils import MidisynthError

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def print_step(step: str, message: str):
    """Print a step indicator."""
    print(f"{Fore.GREEN}[{step}]{Style.RESET_ALL} {message}")


def print_info(message: str):
    """Print info message."""
    print(f"{Fore.CYAN}ℹ{Style.RESET_ALL}  {message}")


def print_error(message: str):
    """Print error message."""
    print(f"{Fore.RED}✗{Style.RESET_ALL}  {message}", file=sys.stderr)


def print_success(message: str):
    """Print success message."""
    print(f"{Fore.GREEN}✓{Style.RESET_ALL}  {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="midisynth",
        description="Render a MIDI file through formula and sample instruments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s arrangement.json
  %(prog)s arrangement.yaml --midi song.mid --output-dir ./renders
  %(prog)s arrangement.json --lenient --verbose
        """,
    )

    parser.add_argument(
        "config",
        help="Arrangement document (.json, .yaml or .yml)"
    )

    parser.add_argument(
        "--midi", "-m",
        type=str,
        default=None,
        help="MIDI file to render (default: metadata.input_file)"
    )

    parser.add_argument(
        "--output-dir", "-o",
        type=str,
        default=None,
        help="Directory for relative output paths (default: current directory)"
    )

    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip notes whose program has no instrument instead of aborting"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    init()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        print_step("1/3", f"Loading arrangement {args.config}")
        arrangement = ConfigLoader().load(args.config)
        if arrangement.comments:
            print_info(arrangement.comments)

        midi_path = args.midi or arrangement.input_file
        if not midi_path:
            raise MidisynthError("No MIDI file given (use --midi or metadata.input_file)")

        print_step("2/3", f"Reading notes from {midi_path}")
        notes = read_notes(midi_path, arrangement.render.sample_rate)
        print_info(f"{len(notes)} notes at {arrangement.render.sample_rate} Hz")

        print_step("3/3", f"Rendering {len(arrangement.outputs)} output(s)")
        renderer = AudioRenderer(arrangement, strict=False if args.lenient else None)
        written = renderer.render_to_files(notes, output_dir=args.output_dir)

        for path in written:
            print_success(f"{Path(path).name}")
        return 0

    except KeyboardInterrupt:
        print_error("Rendering cancelled by user")
        return 130

    except MidisynthError as e:
        logging.getLogger("midisynth").error(f"Rendering failed: {e}")
        print_error(f"Rendering failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
