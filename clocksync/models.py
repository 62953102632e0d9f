"""Data models for clocksync."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class SamplePoint:
    """A planned sample: the n-th sample lands on frame_index at video_time."""

    index: int
    frame_index: int
    video_time: float


@dataclass(frozen=True)
class Observation:
    """One successfully read (video time, clock time) pair."""

    frame_index: int
    video_time: float
    clock_time: float

    def __post_init__(self) -> None:
        if self.frame_index < 0:
            raise ValueError(f"frame_index must be >= 0, got {self.frame_index}")
        if self.video_time < 0:
            raise ValueError(f"video_time must be >= 0, got {self.video_time}")
        if self.clock_time < 0:
            raise ValueError(f"clock_time must be >= 0, got {self.clock_time}")


@dataclass(frozen=True)
class StreamResult:
    """Observations read from one video, in increasing video time."""

    label: str
    nominal_fps: float
    duration: float
    observations: Tuple[Observation, ...] = ()
    samples_attempted: int = 0

    @property
    def detection_rate(self) -> float:
        """Fraction of attempted samples that produced an observation."""
        if self.samples_attempted == 0:
            return 0.0
        return len(self.observations) / self.samples_attempted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "nominal_fps": self.nominal_fps,
            "duration": self.duration,
            "samples_attempted": self.samples_attempted,
            "detection_rate": self.detection_rate,
            "observations": [
                {
                    "frame_index": obs.frame_index,
                    "video_time": obs.video_time,
                    "clock_time": obs.clock_time,
                }
                for obs in self.observations
            ],
        }


@dataclass(frozen=True)
class CandidateMatch:
    """Observations from stream A and B whose clock times agree within tolerance."""

    obs_a: Observation
    obs_b: Observation

    @property
    def offset(self) -> float:
        return self.obs_a.video_time - self.obs_b.video_time

    @property
    def clock_diff(self) -> float:
        return abs(self.obs_a.clock_time - self.obs_b.clock_time)


@dataclass(frozen=True)
class SyncResult:
    """Estimated offset between two streams plus the spread of candidate offsets.

    A positive offset means stream B is ahead: B has to start `offset` seconds
    into its own timeline (or A has to be delayed by that much) to line up.
    """

    offset: float
    match_count: int
    mean: float
    median: float
    std_dev: float
    low_confidence: bool = False

    def __post_init__(self) -> None:
        if self.match_count < 0:
            raise ValueError(f"match_count must be >= 0, got {self.match_count}")
        if self.offset != self.median:
            raise ValueError(f"offset {self.offset} must equal the median {self.median}")
        if self.match_count == 0 and (self.offset != 0 or not self.low_confidence):
            raise ValueError("a result without matches must have offset 0 and low confidence")

    @classmethod
    def unreliable(cls) -> "SyncResult":
        """Result used when the streams share no candidate matches."""
        return cls(offset=0.0, match_count=0, mean=0.0, median=0.0, std_dev=0.0, low_confidence=True)

    @property
    def direction(self) -> str:
        if self.offset > 0:
            return "Video B ahead"
        if self.offset < 0:
            return "Video A ahead"
        return "In sync"

    def start_positions(self) -> Tuple[float, float]:
        """Playback start times (A, B) that align both videos."""
        if self.offset > 0:
            return 0.0, self.offset
        return abs(self.offset), 0.0

    def to_dict(self) -> Dict[str, Any]:
        start_a, start_b = self.start_positions()
        return {
            "offset": self.offset,
            "match_count": self.match_count,
            "mean": self.mean,
            "median": self.median,
            "std_dev": self.std_dev,
            "low_confidence": self.low_confidence,
            "direction": self.direction,
            "start_a": start_a,
            "start_b": start_b,
        }


@dataclass
class SyncReport:
    """Everything produced by one run: both streams, the matches and the result."""

    result: SyncResult
    stream_a: StreamResult
    stream_b: StreamResult
    matches: List[CandidateMatch] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sync": self.result.to_dict(),
            "stream_a": self.stream_a.to_dict(),
            "stream_b": self.stream_b.to_dict(),
            "matches": [
                {
                    "clock_time": m.obs_a.clock_time,
                    "video_time_a": m.obs_a.video_time,
                    "video_time_b": m.obs_b.video_time,
                    "offset": m.offset,
                }
                for m in self.matches
            ],
        }
