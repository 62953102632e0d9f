"""Tunable settings for a synchronization run."""

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# Characters the stopwatch overlay can show
CLOCK_ALLOWLIST = "0123456789:."


@dataclass(frozen=True)
class SyncConfig:
    """Sampling, region, OCR and matching settings.

    The defaults reproduce the documented behaviour: 60 samples at a nominal
    30 fps, a 600x200 window at the centre of a 1920x1080 frame, threshold 150
    and a 0.2s clock tolerance.
    """

    nominal_fps: float = 30.0
    max_samples: int = 60
    frame_size: Tuple[int, int] = (1920, 1080)
    region_size: Tuple[int, int] = (600, 200)
    threshold: int = 150
    tolerance: float = 0.2
    seek_timeout: float = 30.0
    min_confidence: float = 0.0
    allowlist: str = CLOCK_ALLOWLIST
    gpu: Optional[bool] = None
    hwaccel: Optional[str] = None

    def __post_init__(self) -> None:
        if self.nominal_fps <= 0:
            raise ValueError(f"nominal_fps must be positive, got {self.nominal_fps}")
        for name in ("max_samples", "threshold"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if self.max_samples <= 0:
            raise ValueError(f"max_samples must be positive, got {self.max_samples}")
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if not 0 <= self.threshold <= 255:
            raise ValueError(f"threshold must be within 0-255, got {self.threshold}")
        if self.seek_timeout <= 0:
            raise ValueError(f"seek_timeout must be positive, got {self.seek_timeout}")
        # JSON has no tuples
        object.__setattr__(self, "frame_size", tuple(self.frame_size))
        object.__setattr__(self, "region_size", tuple(self.region_size))
        if self.region_size[0] > self.frame_size[0] or self.region_size[1] > self.frame_size[1]:
            raise ValueError(f"region {self.region_size} does not fit in frame {self.frame_size}")

    def with_overrides(self, **overrides: Any) -> "SyncConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def config_from_dict(data: Dict[str, Any]) -> SyncConfig:
    """Build a SyncConfig from a mapping, accepting either a flat object or a "sync" section."""
    section = data.get("sync", data)
    known = {f.name for f in fields(SyncConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    return SyncConfig(**section)


def load_config(path: Path) -> SyncConfig:
    """Load settings from a JSON file."""
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    config = config_from_dict(data)
    logger.info(f"Loaded config from {path}")
    return config
