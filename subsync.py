#!/usr/bin/env python3
"""
Subtitle Sync - Main Application Entry Point
============================================

Parses SRT, ASS/SSA and WebVTT subtitles of unknown encoding and keeps the
currently active lines synchronized against a playback clock.

Usage:
    # Show the detected encoding of a subtitle file
    python subsync.py detect movie.zh.srt

    # List parsed entries
    python subsync.py parse movie.ass

    # Follow subtitles against a simulated clock
    python subsync.py play movie.vtt --offset 1.5

    # Help
    python subsync.py --help
    python subsync.py <command> --help
"""

import sys
from pathlib import Path

# Add the current directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from ui.cli import CLIHandler


def main():
    """
    Main application entry point.

    Parses the command line and dispatches to the CLI handler.
    """
    cli_handler = CLIHandler()
    cli_parser = cli_handler.create_parser()

    debug_mode = '--debug' in sys.argv or '-d' in sys.argv
    try:
        args = cli_parser.parse_args()
        exit_code = cli_handler.handle_command(args)
        sys.exit(exit_code)
    except SystemExit:
        # argparse calls sys.exit() for --help, --version, etc.
        raise
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if debug_mode:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
