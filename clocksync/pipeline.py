"""Run both videos through the OCR pipeline and estimate their offset."""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from clocksync.config import SyncConfig
from clocksync.errors import ClockSyncError
from clocksync.frame_sampler import FFmpegVideoSource, VideoSource
from clocksync.models import SyncReport
from clocksync.ocr_engine import ClockReader, create_reader
from clocksync.offset_estimator import match_streams
from clocksync.stream_processor import ProgressCallback, process_stream

logger = logging.getLogger(__name__)

VideoInput = Union[str, Path, VideoSource]
ReaderFactory = Callable[[SyncConfig], ClockReader]
SourceFactory = Callable[[Path, SyncConfig], VideoSource]


def default_reader_factory(config: SyncConfig) -> ClockReader:
    return create_reader(
        allowlist=config.allowlist,
        gpu=config.gpu,
        min_confidence=config.min_confidence
    )


def default_source_factory(path: Path, config: SyncConfig) -> VideoSource:
    return FFmpegVideoSource(path, hwaccel=config.hwaccel, timeout=config.seek_timeout)


def _open_source(video: VideoInput, config: SyncConfig, source_factory: SourceFactory) -> VideoSource:
    if isinstance(video, (str, Path)):
        return source_factory(Path(video).expanduser(), config)
    return video


def run_sync(
    video_a: VideoInput,
    video_b: VideoInput,
    config: Optional[SyncConfig] = None,
    progress: Optional[ProgressCallback] = None,
    reader_factory: ReaderFactory = default_reader_factory,
    source_factory: SourceFactory = default_source_factory
) -> SyncReport:
    """
    Read the stopwatch in both videos and compute the offset between them.

    One OCR reader is created up front, used for video A and then video B
    (never both at once) and closed before returning, including when a video
    fails to load.

    Args:
        video_a: Path or VideoSource for the first video
        video_b: Path or VideoSource for the second video
        config: Run settings (default: SyncConfig())
        progress: Optional per-sample callback passed to the stream processor
        reader_factory: Builds the OCR reader from the config
        source_factory: Opens a path as a VideoSource

    Returns:
        SyncReport with both stream results, the matches and the offset

    Raises:
        OCRUnavailable: If the OCR reader cannot be initialized
        SourceUnavailable: If either video cannot be loaded or decoded
    """
    config = config or SyncConfig()

    logger.info("Initializing OCR reader")
    reader = reader_factory(config)
    try:
        source_a = _open_source(video_a, config, source_factory)
        stream_a = process_stream(source_a, "A", reader, config, progress)
        logger.info(f"Video A processed: {len(stream_a.observations)} timestamps detected")

        source_b = _open_source(video_b, config, source_factory)
        stream_b = process_stream(source_b, "B", reader, config, progress)
        logger.info(f"Video B processed: {len(stream_b.observations)} timestamps detected")
    except ClockSyncError as e:
        logger.error(f"Error processing videos: {e}")
        raise
    finally:
        reader.close()

    matches, result = match_streams(stream_a, stream_b, config.tolerance)
    logger.info(f"Sync offset calculated: {result.offset:.4f}s")
    return SyncReport(result=result, stream_a=stream_a, stream_b=stream_b, matches=matches)
