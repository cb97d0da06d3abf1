"""
Command-line interface for Subtitle Sync.

This module provides the CLI commands for inspecting subtitle files and for
following a subtitle file against a simulated playback clock.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from utils.constants import APP_NAME, APP_VERSION, APP_DESCRIPTION
from utils.config import SyncSettings
from utils.file_operations import FileHandler
from utils.logging_config import setup_logging, get_logger
from core.encoding_detection import EncodingDetector
from core.exceptions import SubtitleError
from core.subtitle_formats import ParseResult, SubtitleFormatFactory
from core.timing_utils import TimeConverter
from playback.clock_source import PlaybackClock, PlaybackEvent
from playback.sync_engine import SyncEngine

logger = get_logger(__name__)


def setup_cli_logging(verbose: bool = False, debug: bool = False,
                      use_colors: bool = True,
                      log_file: Optional[Path] = None) -> logging.Logger:
    """Set up logging for CLI operations."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    return setup_logging(level=level, log_file=log_file, use_colors=use_colors)


class CLIHandler:
    """Handles command-line interface operations."""

    def create_parser(self) -> argparse.ArgumentParser:
        """
        Create the main argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog='subsync',
            description=f"{APP_NAME} v{APP_VERSION}\n{APP_DESCRIPTION}",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Show the detected encoding of a subtitle file
  subsync detect movie.zh.srt

  # List the parsed entries
  subsync parse movie.ass --limit 20

  # Follow the subtitles in real time, 1.5s late, starting at 1 minute
  subsync play movie.vtt --offset 1.5 --start 60
            """
        )

        parser.add_argument('--version', action='version', version=f'{APP_NAME} {APP_VERSION}')
        parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')
        parser.add_argument('-d', '--debug', action='store_true', help='Enable debug output')
        parser.add_argument('--no-colors', action='store_true', help='Disable colored output')
        parser.add_argument('--log-file', type=Path, help='Also write log messages to this file')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')
        self._add_detect_parser(subparsers)
        self._add_parse_parser(subparsers)
        self._add_play_parser(subparsers)

        return parser

    def _add_detect_parser(self, subparsers):
        """Add detect command parser."""
        detect_parser = subparsers.add_parser(
            'detect',
            help='Detect subtitle file encoding',
            description='Show the encoding chosen for a subtitle file'
        )
        detect_parser.add_argument('input', type=Path, help='Subtitle file')

    def _add_parse_parser(self, subparsers):
        """Add parse command parser."""
        parse_parser = subparsers.add_parser(
            'parse',
            help='Parse a subtitle file and list its entries',
            description='Parse SRT, ASS/SSA or VTT files into timed entries'
        )
        parse_parser.add_argument('input', type=Path, help='Subtitle file')
        parse_parser.add_argument('-e', '--encoding',
                                  help='Force an encoding instead of detecting it')
        parse_parser.add_argument('-n', '--limit', type=int,
                                  help='Only list the first N entries')

    def _add_play_parser(self, subparsers):
        """Add play command parser."""
        play_parser = subparsers.add_parser(
            'play',
            help='Follow a subtitle file against a simulated playback clock',
            description='Print active subtitle text as it changes during playback'
        )
        play_parser.add_argument('input', type=Path, help='Subtitle file')
        play_parser.add_argument('-e', '--encoding',
                                 help='Force an encoding instead of detecting it')
        play_parser.add_argument('-o', '--offset', type=float, default=0.0,
                                 help='Time offset in seconds; positive shows subtitles later (default: 0)')
        play_parser.add_argument('-s', '--start', type=float, default=0.0,
                                 help='Start position in seconds (default: 0)')
        play_parser.add_argument('-r', '--rate', type=float, default=1.0,
                                 help='Playback rate (default: 1.0)')
        play_parser.add_argument('--duration', type=float,
                                 help='Seconds of media to play (default: until the last entry ends)')

    def handle_command(self, args) -> int:
        """
        Handle the parsed command-line arguments.

        Args:
            args: Parsed arguments from argparse

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        setup_cli_logging(args.verbose, args.debug, use_colors=not args.no_colors,
                          log_file=args.log_file)

        if not args.command:
            logger.error("No command specified. Use --help for usage information.")
            return 1

        try:
            if args.command == 'detect':
                return self._handle_detect(args)
            elif args.command == 'parse':
                return self._handle_parse(args)
            elif args.command == 'play':
                return self._handle_play(args)
            else:
                logger.error(f"Unknown command: {args.command}")
                return 1

        except SubtitleError as e:
            logger.error(str(e))
            return 1
        except (FileNotFoundError, IOError) as e:
            logger.error(f"Cannot read input: {e}")
            return 1
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 1
        except Exception as e:
            logger.error(f"Unexpected error: {e}")
            if args.debug:
                import traceback
                traceback.print_exc()
            return 1

    def _handle_detect(self, args) -> int:
        """Handle detect command."""
        if not args.input.exists():
            logger.error(f"Input file not found: {args.input}")
            return 1

        data = FileHandler.read_bytes(args.input)
        print(f"File: {args.input.name}")
        print(f"Size: {len(data)} bytes")
        print(f"BOM: {'yes' if EncodingDetector.has_bom(data) else 'no'}")
        print(f"Encoding: {EncodingDetector.detect(data)}")
        suggestion = EncodingDetector.suggest_charset(data)
        print(f"charset-normalizer: {suggestion or 'unknown'}")
        return 0

    def _load(self, args) -> Optional[ParseResult]:
        if not args.input.exists():
            logger.error(f"Input file not found: {args.input}")
            return None
        if not FileHandler.is_subtitle_file(args.input):
            logger.error(f"Not a subtitle file: {args.input}")
            return None
        return SubtitleFormatFactory.parse_file(args.input, encoding=args.encoding)

    def _handle_parse(self, args) -> int:
        """Handle parse command."""
        result = self._load(args)
        if result is None:
            return 1

        print(f"{result.file_name}: {result.count} entries "
              f"({result.format.value}, {result.encoding})")
        entries = result.entries if args.limit is None else result.entries[:args.limit]
        for i, entry in enumerate(entries, start=1):
            print(f"{i}\n{entry.format_time_range('srt')}\n{entry.text}\n")
        return 0

    def _handle_play(self, args) -> int:
        """Handle play command."""
        if args.rate <= 0:
            logger.error("Playback rate must be positive")
            return 1

        result = self._load(args)
        if result is None:
            return 1

        return asyncio.run(self._play(result, args))

    async def _play(self, result: ParseResult, args) -> int:
        """Run the sync engine against a simulated clock until playback ends."""
        last_end = max(entry.end for entry in result.entries) + max(args.offset, 0.0)
        stop_at = last_end if args.duration is None else args.start + args.duration
        if stop_at <= args.start:
            logger.error("Nothing to play after the start position")
            return 1

        clock = PlaybackClock(duration=stop_at, name=result.file_name)
        engine = SyncEngine(settings=SyncSettings.from_env())

        def show_text(text, entries):
            stamp = TimeConverter.seconds_to_time(clock.current_time, 'srt')
            print(f"[{stamp}] {text}" if text else f"[{stamp}] --", flush=True)

        def show_state(event: PlaybackEvent):
            logger.info(f"Playback {event.kind.value} at {event.current_time:.3f}s "
                        f"(paused={event.paused}, rate={event.playback_rate})")

        engine.on_active_text_change(show_text)
        engine.on_playback_state_change(show_state)

        engine.init(clock, result.entries)
        try:
            engine.set_time_offset(args.offset)
            if args.rate != 1.0:
                clock.set_rate(args.rate)
            if args.start:
                clock.seek(args.start)
            clock.play()
            await asyncio.sleep((stop_at - args.start) / args.rate)
            clock.end()

            progress = engine.get_progress()
            print(f"Reached entry {progress.current_index}/{progress.total} "
                  f"at {TimeConverter.format_duration(progress.current_time)}")
        finally:
            engine.destroy()

        return 0


def main():
    """Main entry point for CLI."""
    cli = CLIHandler()
    parser = cli.create_parser()
    args = parser.parse_args()

    exit_code = cli.handle_command(args)
    sys.exit(exit_code)


if __name__ == '__main__':
    main()
