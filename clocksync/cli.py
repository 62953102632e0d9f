#!/usr/bin/env python3
"""Command-line interface for clocksync."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PIL import Image
from rich.console import Console

from clocksync.config import SyncConfig, load_config
from clocksync.display import SyncProgressDisplay, print_report
from clocksync.errors import ClockSyncError
from clocksync.frame_sampler import FFmpegVideoSource
from clocksync.pipeline import default_reader_factory, run_sync
from clocksync.profiler import profiler
from clocksync.region import isolate_region
from clocksync.time_parser import correct_confusions, format_clock_time, parse_clock_time

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {'.png', '.jpg', '.jpeg', '.bmp', '.tif', '.tiff', '.webp'}

# Exit status when the two videos share no readable clock times
EXIT_NO_CORRESPONDENCE = 3


def _suppress_logging():
    """Suppress logging output that interferes with the rich live display."""
    null_handler = logging.NullHandler()
    logger = logging.getLogger('clocksync')
    logger.setLevel(logging.CRITICAL)
    logger.handlers = [null_handler]
    logger.propagate = False


def _configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _ocr_device(value: str) -> Optional[bool]:
    return {"gpu": True, "cpu": False}.get(value)


def _build_config(args) -> SyncConfig:
    config = load_config(Path(args.config).expanduser()) if args.config else SyncConfig()
    return config.with_overrides(
        nominal_fps=args.fps,
        max_samples=getattr(args, "max_samples", None),
        tolerance=getattr(args, "tolerance", None),
        threshold=args.threshold,
        seek_timeout=args.seek_timeout,
        gpu=_ocr_device(args.ocr_device),
        hwaccel=args.hwaccel,
    )


def _add_common_options(parser: argparse.ArgumentParser):
    parser.add_argument("--config", type=str, default=None, help="JSON file with sync settings")
    parser.add_argument("--fps", type=float, default=None, help="Nominal frame rate used for sampling (default: 30)")
    parser.add_argument("--threshold", type=int, default=None, help="Binarization luminance threshold 0-255 (default: 150)")
    parser.add_argument("--seek-timeout", type=float, default=None, help="Seconds to wait for one frame decode (default: 30)")
    parser.add_argument("--ocr-device", type=str, default="auto", choices=["auto", "gpu", "cpu"], help="Force OCR device usage (default: auto)")
    parser.add_argument("--hwaccel", type=str, default=None, choices=['videotoolbox', 'vaapi', 'd3d11va', 'dxva2', 'cuda', 'auto'], help="FFmpeg hardware acceleration")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level (default: INFO)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clocksync",
        description="Synchronize two videos that both film the same on-screen stopwatch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compute the offset between two recordings:
  clocksync sync left.mp4 right.mp4

  # Sample more densely and write a JSON report:
  clocksync sync left.mp4 right.mp4 --max-samples 120 --report sync.json

  # Check what OCR reads on a single frame:
  clocksync read left.mp4 --at 12.5 --save-region region.png
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Compute the offset between two videos")
    sync.add_argument("video_a", type=str, help="First video (A)")
    sync.add_argument("video_b", type=str, help="Second video (B)")
    sync.add_argument("--max-samples", type=int, default=None, help="Maximum frames sampled per video (default: 60)")
    sync.add_argument("--tolerance", type=float, default=None, help="Clock time tolerance for matching in seconds (default: 0.2)")
    sync.add_argument("--report", type=str, default=None, help="Write the full result as JSON to this file")
    sync.add_argument("--profile", type=str, default=None, help="Enable profiling and write to specified JSON file")
    sync.add_argument("--no-display", action="store_true", help="Log progress instead of showing the live display")
    _add_common_options(sync)

    read = subparsers.add_parser("read", help="Read the stopwatch on one image or video frame")
    read.add_argument("input", type=str, help="Image file, or video file together with --at")
    read.add_argument("--at", type=float, default=0.0, help="Video time in seconds to read (default: 0)")
    read.add_argument("--save-region", type=str, default=None, help="Save the binarized clock region to this file")
    _add_common_options(read)

    return parser


def _load_frame(path: Path, at: float, config: SyncConfig) -> Image.Image:
    if path.suffix.lower() in IMAGE_SUFFIXES:
        with Image.open(path) as image:
            return image.convert('RGB').resize(config.frame_size)
    source = FFmpegVideoSource(path, hwaccel=config.hwaccel, timeout=config.seek_timeout)
    return source.grab_frame(at, config.frame_size)


def _run_read(args, config: SyncConfig, console: Console) -> int:
    path = Path(args.input).expanduser()
    if not path.exists():
        console.print(f"[red]Error:[/red] File not found: {path}")
        return 1

    frame = _load_frame(path, args.at, config)
    region = isolate_region(frame, config.region_size, config.threshold)
    if args.save_region:
        region.save(args.save_region)
        console.print(f"[dim]Saved clock region to {args.save_region}[/dim]")

    with default_reader_factory(config) as reader:
        text = reader.recognize(region)

    clock_time = parse_clock_time(text)
    console.print(f"[dim]Raw OCR text:[/dim] {text!r}")
    console.print(f"[dim]Cleaned text:[/dim] {correct_confusions(text)!r}")
    if clock_time is None:
        console.print("[red]✗ No valid stopwatch time[/red]")
        return 1
    console.print(f"[green]✓ Stopwatch {format_clock_time(clock_time)} ({clock_time:.3f}s)[/green]")
    return 0


def _run_sync(args, config: SyncConfig, console: Console) -> int:
    display = None
    if not args.no_display:
        _suppress_logging()
        display = SyncProgressDisplay()
        display.start()

    if args.profile:
        profiler.enable(args.profile)

    try:
        report = run_sync(
            args.video_a,
            args.video_b,
            config,
            progress=display.on_sample if display else None
        )
    finally:
        if display:
            display.finish()
            display.stop()
        if args.profile:
            profiler.save_results()

    print_report(report, console)

    if args.report:
        with open(args.report, 'w') as f:
            json.dump(report.to_dict(), f, indent=2)
        console.print(f"[dim]Report written to {args.report}[/dim]")

    if report.result.low_confidence:
        console.print("[yellow]WARNING:[/yellow] No matching timestamps; the offset is not reliable.")
        return EXIT_NO_CORRESPONDENCE
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)
    console = Console(stderr=False)
    err_console = Console(stderr=True)

    try:
        config = _build_config(args)
        if args.command == "read":
            return _run_read(args, config, console)
        return _run_sync(args, config, console)
    except (ClockSyncError, ValueError, OSError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        return 1
    except KeyboardInterrupt:
        err_console.print("[yellow]Interrupted[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
