"""CLI for faceguide: ``faceguide run`` and ``faceguide info``."""

import argparse
import logging
import sys

from faceguide.config import (
    CALIBRATE_MIN_STREAK,
    CLOSE_FACTOR,
    CONFIDENCE_MIN,
    FAR_FACTOR,
    LOST_RESET_STREAK,
    GuideConfig,
)

logger = logging.getLogger(__name__)

_DEFAULTS = GuideConfig()


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    """Add GuideConfig override arguments to a parser."""
    parser.add_argument(
        "--min-frames-in", type=int, default=_DEFAULTS.min_frames_in,
        help=f"Good frames before capture is allowed (default: {_DEFAULTS.min_frames_in})",
    )
    parser.add_argument(
        "--min-frames-out", type=int, default=_DEFAULTS.min_frames_out,
        help=f"Bad frames before capture is revoked (default: {_DEFAULTS.min_frames_out})",
    )
    parser.add_argument(
        "--no-box-inside", action="store_true",
        help="Do not require the landmark bounding box to fit inside the ellipse",
    )
    parser.add_argument(
        "--percent-inside", type=float, default=_DEFAULTS.percent_inside_required,
        help=f"Minimum fraction of landmarks inside the ellipse (default: {_DEFAULTS.percent_inside_required})",
    )
    parser.add_argument(
        "--ellipse-margin", type=float, default=_DEFAULTS.ellipse_margin,
        help=f"Guide ellipse scale (default: {_DEFAULTS.ellipse_margin})",
    )
    parser.add_argument(
        "--min-eye-ratio", type=float, default=_DEFAULTS.min_eye_ratio,
        help=f"Uncalibrated too-far eye ratio (default: {_DEFAULTS.min_eye_ratio})",
    )
    parser.add_argument(
        "--max-eye-ratio", type=float, default=_DEFAULTS.max_eye_ratio,
        help=f"Uncalibrated too-close eye ratio (default: {_DEFAULTS.max_eye_ratio})",
    )
    parser.add_argument(
        "--no-flip", action="store_true",
        help="Do not mirror the preview",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faceguide",
        description="Live face capture guide",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  faceguide run -i 0                        # Webcam with live preview
  faceguide run -i selfie.mp4 --no-window   # Log transitions only
  faceguide run -i 0 -o guide.mp4           # Save annotated preview
  faceguide info --min-frames-in 10         # Show effective configuration
""",
    )
    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="Run the guide on a camera or video")
    run_p.add_argument(
        "--input", "-i",
        required=True,
        help="Input source: file path or camera index (int)",
    )
    run_p.add_argument(
        "--max-frames", type=int, default=None,
        help="Stop after N processed frames",
    )
    run_p.add_argument(
        "--no-window", action="store_true",
        help="Disable the live preview window",
    )
    run_p.add_argument(
        "-o", "--output", default=None,
        help="Save annotated preview video to this path",
    )
    run_p.add_argument(
        "--keypoints", action="store_true",
        help="Draw landmark points in the preview",
    )
    run_p.add_argument(
        "--backend", choices=["mediapipe"], default="mediapipe",
        help="Landmark backend (default: mediapipe)",
    )
    run_p.add_argument(
        "-v", "--verbose", action="store_true",
        help="Verbose output",
    )
    _add_config_args(run_p)

    info_p = sub.add_parser("info", help="Show effective configuration and constants")
    _add_config_args(info_p)

    return parser


def _config_from_args(args: argparse.Namespace) -> GuideConfig:
    """Map parsed arguments to a GuideConfig (validated)."""
    return GuideConfig(
        min_frames_in=args.min_frames_in,
        min_frames_out=args.min_frames_out,
        box_inside_required=not args.no_box_inside,
        percent_inside_required=args.percent_inside,
        ellipse_margin=args.ellipse_margin,
        min_eye_ratio=args.min_eye_ratio,
        max_eye_ratio=args.max_eye_ratio,
        preview_flip=not args.no_flip,
    )


def _resolve_input(input_str: str):
    """Resolve --input to a source path or camera index."""
    try:
        return int(input_str)
    except ValueError:
        return input_str


def _cmd_info(args: argparse.Namespace) -> None:
    """Handle ``faceguide info``."""
    config = _config_from_args(args)
    print("Configuration:")
    for key, value in config.to_dict().items():
        print(f"  {key:24s} {value}")
    print("Constants:")
    for key, value in (
        ("calibrate_min_streak", CALIBRATE_MIN_STREAK),
        ("far_factor", FAR_FACTOR),
        ("close_factor", CLOSE_FACTOR),
        ("lost_reset_streak", LOST_RESET_STREAK),
        ("confidence_min", CONFIDENCE_MIN),
    ):
        print(f"  {key:24s} {value}")


def _cmd_run(args: argparse.Namespace) -> None:
    """Handle ``faceguide run``."""
    from faceguide.main import run

    config = _config_from_args(args)
    source = _resolve_input(args.input)

    result = run(
        source,
        config=config,
        backend=args.backend,
        window=not args.no_window,
        output=args.output,
        max_frames=args.max_frames,
        show_keypoints=args.keypoints,
    )
    for frame_id, name, value in result.transitions:
        shown = getattr(value, "value", value)
        print(f"  frame={frame_id} {name}={shown}")
    print(
        f"\nDone: {result.frame_count} frames, "
        f"capture allowed on {result.capture_allowed_frames}"
    )


def main(argv=None):
    """Entry point for ``faceguide`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "info":
            _cmd_info(args)
        elif args.command == "run":
            _cmd_run(args)
    except (ValueError, IOError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
