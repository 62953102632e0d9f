"""Read the stopwatch on sampled frames of one video."""

import logging
from typing import Callable, List, Optional

from clocksync.config import SyncConfig
from clocksync.frame_sampler import VideoSource, compute_sample_points, sample_frames
from clocksync.models import Observation, StreamResult
from clocksync.ocr_engine import ClockReader
from clocksync.profiler import profiler
from clocksync.region import isolate_region
from clocksync.time_parser import parse_clock_time

logger = logging.getLogger(__name__)

# (label, sample index, total samples, observation or None when the read failed)
ProgressCallback = Callable[[str, int, int, Optional[Observation]], None]


def process_stream(
    source: VideoSource,
    label: str,
    reader: ClockReader,
    config: Optional[SyncConfig] = None,
    progress: Optional[ProgressCallback] = None
) -> StreamResult:
    """
    Sample a video, read the clock on every sample and collect observations.

    Samples are handled strictly in increasing video time. A sample whose text
    does not parse is skipped without retry; it still counts as attempted.

    Args:
        source: Video to sample
        label: Name used in logs and the result ("A", "B", ...)
        reader: Initialized OCR reader, shared by the caller across streams
        config: Sampling/region settings (default: SyncConfig())
        progress: Optional callback invoked after every sample

    Returns:
        StreamResult with observations in sampling order

    Raises:
        SourceUnavailable: If the video cannot be probed or a seek fails
    """
    config = config or SyncConfig()
    duration = source.duration
    total = len(compute_sample_points(duration, config.nominal_fps, config.max_samples))

    observations: List[Observation] = []
    attempted = 0

    for point, frame in sample_frames(source, config.nominal_fps, config.max_samples, config.frame_size):
        attempted += 1
        region = isolate_region(frame, config.region_size, config.threshold)
        text = reader.recognize(region)

        with profiler.timed("parse"):
            clock_time = parse_clock_time(text)

        observation = None
        if clock_time is None:
            logger.debug(f"{label} - Frame {point.index}: OCR failed (read {text!r})")
        else:
            observation = Observation(
                frame_index=point.frame_index,
                video_time=point.video_time,
                clock_time=clock_time
            )
            observations.append(observation)
            logger.debug(
                f"{label} - Frame {point.index}: Video time {point.video_time:.2f}s "
                f"-> Stopwatch {clock_time:.3f}s (read {text!r})"
            )

        if progress:
            progress(label, point.index, total, observation)

    logger.info(f"Video {label} processed: {len(observations)}/{attempted} samples read")
    return StreamResult(
        label=label,
        nominal_fps=config.nominal_fps,
        duration=duration,
        observations=tuple(observations),
        samples_attempted=attempted
    )
