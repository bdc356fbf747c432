"""
Command-line interface for vidsplit
"""
import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import DEFAULT_SEGMENT_SECONDS, LOG_LEVEL, OUTPUT_DIR, SplitSettings
from .events import EventType
from .exceptions import ConfigurationError, DependencyError, RunInProgressError
from .formatting import (
    print_check, print_error, print_errors, print_header, print_info,
    print_listing, print_state
)
from .logging import configure_logging
from .models import Rotation, Scale, TransformSpec
from .pipeline import SplitController
from .probe import probe_asset
from .session import EditingSession
from .timecode import ms_to_timecode, parse_timecode
from .utils import check_dependencies

ROTATE_CHOICES = {str(r.value): r for r in Rotation}
SCALE_CHOICES = {"native": Scale.NATIVE, **{str(s.value): s for s in Scale if s is not Scale.NATIVE}}

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="vidsplit",
        description="Trim a video and split it into fixed-length segments"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=LOG_LEVEL,
        help="Set logging level (default: %(default)s)"
    )
    parser.add_argument("--no-log-file", dest="file_logging", action="store_false",
                        help="Only log to the console")
    parser.add_argument("-o", "--output", type=Path, default=OUTPUT_DIR,
                        help="Output directory; its previous contents are deleted (default: %(default)s)")
    parser.add_argument("--start", default=None, help="Trim start, [[HH:]MM:]SS (default: 0)")
    parser.add_argument("--end", default=None, help="Trim end, [[HH:]MM:]SS (default: end of video)")
    parser.add_argument("--segment", default=DEFAULT_SEGMENT_SECONDS,
                        help="Segment length in seconds (default: %(default)s)")
    parser.add_argument("--rotate", choices=list(ROTATE_CHOICES), default="0",
                        help="Rotation in degrees (default: %(default)s)")
    parser.add_argument("--scale", choices=list(SCALE_CHOICES), default="native",
                        help="Target short-side resolution (default: %(default)s)")
    parser.add_argument("input", type=Path, help="Input video file")
    return parser.parse_args(argv)


def build_session(args) -> EditingSession:
    """Translate CLI arguments into an editing session."""
    session = EditingSession()
    session.load_asset(probe_asset(args.input))
    if args.end is not None:
        session.set_end(parse_timecode(args.end))
    if args.start is not None and not session.set_start(parse_timecode(args.start)):
        raise ConfigurationError(
            f"Start {args.start} is after end {ms_to_timecode(session.trim.end_ms)}", module="cli"
        )
    session.transform = TransformSpec(ROTATE_CHOICES[args.rotate], SCALE_CHOICES[args.scale])
    session.set_segment_length(args.segment)
    return session


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)
    configure_logging(args.log_level, file_logging=args.file_logging)
    log = logging.getLogger("vidsplit")
    print_header(f"vidsplit v{__version__}")

    controller = None
    try:
        if not check_dependencies():
            raise DependencyError("ffmpeg and ffprobe must be on PATH", module="cli")
        session = build_session(args)
        trim = session.trim
        print_check(f"Input: {session.asset.filename}")
        print_check(f"Range: {ms_to_timecode(trim.start_ms)} - {ms_to_timecode(trim.end_ms)}")
        print_check(f"Transform: rotate {session.transform.rotate.value}, "
                    f"scale {session.transform.scale.label}")

        settings = SplitSettings.from_environment(output_dir=args.output)
        controller = SplitController(settings)
        controller.emitter.on(EventType.STATE_CHANGED, lambda event: print_state(event.data["state"]))
        print_info(f"Writing segments to {settings.output_dir}")
        result = controller.request_split_from_session(session)
    except (ConfigurationError, RunInProgressError) as e:
        print_error(e.message)
        return EXIT_CONFIG
    except DependencyError as e:
        log.error("Missing required dependencies: %s", e.message)
        return EXIT_FAILED
    except KeyboardInterrupt:
        if controller is not None:
            controller.cancel()
        log.warning("Split interrupted by user")
        return EXIT_INTERRUPTED

    print_listing(result.listing)
    if not result.ok:
        print_errors(result.state.errors)
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
