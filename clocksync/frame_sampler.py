"""Frame sampling from video files using ffmpeg."""

import io
import logging
import math
import subprocess
from pathlib import Path
from typing import Generator, List, Optional, Protocol, Tuple, Union

from PIL import Image

from clocksync.errors import SourceUnavailable
from clocksync.models import SamplePoint
from clocksync.profiler import profiler

try:
    import ffmpeg
except ImportError:
    ffmpeg = None

logger = logging.getLogger(__name__)

DEFAULT_FPS = 30.0
DEFAULT_MAX_SAMPLES = 60
DEFAULT_FRAME_SIZE = (1920, 1080)


class VideoSource(Protocol):
    """A seekable video that can render the frame at a given time."""

    name: str

    @property
    def duration(self) -> float:
        ...

    def grab_frame(self, time: float, size: Tuple[int, int]) -> Image.Image:
        ...


def compute_sample_points(
    duration: float,
    fps: float = DEFAULT_FPS,
    max_samples: int = DEFAULT_MAX_SAMPLES
) -> List[SamplePoint]:
    """
    Pick evenly spaced sample frames across a video.

    With total = floor(duration * fps), takes min(max_samples, total) samples
    spaced floor(total / samples) frames apart, starting at frame 0. Every
    sample time lies in [0, duration).

    Args:
        duration: Video duration in seconds
        fps: Nominal frame rate used to convert between frames and seconds
        max_samples: Upper bound on the number of samples

    Returns:
        Sample points in increasing time order (empty for zero-length video)
    """
    if not duration or not math.isfinite(duration) or duration <= 0:
        return []

    total_frames = int(math.floor(duration * fps))
    sample_count = min(max_samples, total_frames)
    if sample_count <= 0:
        return []

    interval = total_frames // sample_count
    return [
        SamplePoint(index=i, frame_index=i * interval, video_time=(i * interval) / fps)
        for i in range(sample_count)
    ]


def sample_frames(
    source: VideoSource,
    fps: float = DEFAULT_FPS,
    max_samples: int = DEFAULT_MAX_SAMPLES,
    frame_size: Tuple[int, int] = DEFAULT_FRAME_SIZE
) -> Generator[Tuple[SamplePoint, Image.Image], None, None]:
    """
    Yield (sample point, rendered frame) pairs in increasing time order.

    Each frame is fetched only after the previous one has been consumed, so
    at most one seek is ever in flight.
    """
    points = compute_sample_points(source.duration, fps, max_samples)
    logger.info(
        f"{source.name}: {source.duration:.2f}s, "
        f"{int(math.floor(source.duration * fps))} frames at {fps:g} fps, sampling {len(points)}"
    )
    for point in points:
        with profiler.timed("seek"):
            image = source.grab_frame(point.video_time, frame_size)
        yield point, image


class FFmpegVideoSource:
    """Video file read through ffmpeg, one single-frame decode per seek."""

    def __init__(
        self,
        media_file: Union[str, Path],
        hwaccel: Optional[str] = None,
        timeout: float = 30.0
    ):
        self.media_file = Path(media_file)
        self.name = self.media_file.name
        self.hwaccel = hwaccel
        self.timeout = timeout
        self._duration: Optional[float] = None

        if ffmpeg is None:
            raise SourceUnavailable(
                str(self.media_file),
                "ffmpeg-python is not installed. Please install it with: pip install ffmpeg-python"
            )
        if not self.media_file.exists():
            raise SourceUnavailable(str(self.media_file), "file not found")

    @property
    def duration(self) -> float:
        if self._duration is None:
            self._duration = self._probe_duration()
        return self._duration

    def _probe_duration(self) -> float:
        try:
            probe = ffmpeg.probe(str(self.media_file))
        except ffmpeg.Error as e:
            stderr = e.stderr.decode('utf8', errors='ignore') if e.stderr else str(e)
            raise SourceUnavailable(str(self.media_file), f"ffprobe failed: {stderr[-200:].strip()}") from e
        except OSError as e:
            raise SourceUnavailable(str(self.media_file), f"ffprobe could not be run: {e}") from e

        video_stream = next(
            (stream for stream in probe.get('streams', []) if stream.get('codec_type') == 'video'),
            None
        )
        if video_stream is None:
            raise SourceUnavailable(str(self.media_file), "no video stream")

        for value in (probe.get('format', {}).get('duration'), video_stream.get('duration')):
            if value is None:
                continue
            try:
                return float(value)
            except (TypeError, ValueError):
                continue
        raise SourceUnavailable(str(self.media_file), "duration unknown")

    def grab_frame(self, time: float, size: Tuple[int, int] = DEFAULT_FRAME_SIZE) -> Image.Image:
        """Seek to `time` and decode exactly one frame scaled to `size`."""
        input_kwargs = {'ss': f"{time:.3f}"}
        if self.hwaccel:
            input_kwargs['hwaccel'] = self.hwaccel

        width, height = size
        try:
            process = (
                ffmpeg
                .input(str(self.media_file), **input_kwargs)
                .filter('scale', width, height)
                .output('pipe:', vframes=1, format='image2pipe', vcodec='mjpeg', **{'q:v': '2'})
                .run_async(pipe_stdout=True, pipe_stderr=True)
            )
        except OSError as e:
            raise SourceUnavailable(str(self.media_file), f"ffmpeg could not be run: {e}") from e

        try:
            stdout, stderr = process.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()
            raise SourceUnavailable(
                str(self.media_file),
                f"seek to {time:.3f}s did not complete within {self.timeout:g}s"
            )

        if process.returncode != 0 or not stdout:
            message = stderr.decode('utf8', errors='ignore')[-200:].strip() if stderr else "no frame decoded"
            raise SourceUnavailable(str(self.media_file), f"seek to {time:.3f}s failed: {message}")

        try:
            image = Image.open(io.BytesIO(stdout))
            image.load()
        except OSError as e:
            raise SourceUnavailable(str(self.media_file), f"frame at {time:.3f}s is not decodable: {e}") from e

        if image.mode != 'RGB':
            image = image.convert('RGB')
        return image
