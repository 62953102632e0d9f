"""Timing profiler for seek, OCR and parse stages."""

import json
import logging
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)


class Profiler:
    """Singleton profiler collecting per-stage durations.

    Disabled by default; every call is a no-op until enable() is called.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super(Profiler, cls).__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.enabled = False
        self.output_file: Optional[str] = None
        self.metrics: Dict[str, List[float]] = defaultdict(list)
        self.start_time: Optional[float] = None
        self._initialized = True

    def enable(self, output_file: str) -> None:
        """Start collecting metrics; save_results() writes them to output_file."""
        self.enabled = True
        self.output_file = output_file
        self.start_time = time.time()
        logger.info(f"Profiling enabled. Output will be written to {output_file}")

    def disable(self) -> None:
        self.enabled = False
        self.output_file = None
        with self._lock:
            self.metrics.clear()

    @contextmanager
    def timed(self, key: str) -> Iterator[None]:
        """Record how long the wrapped block takes under `key`."""
        if not self.enabled:
            yield
            return
        start = time.perf_counter()
        try:
            yield
        finally:
            self.add_metric(key, time.perf_counter() - start)

    def add_metric(self, key: str, value: float) -> None:
        if not self.enabled:
            return
        with self._lock:
            self.metrics[key].append(value)

    def summary(self) -> Dict[str, Any]:
        """Count/total/avg/min/max per recorded key."""
        total_duration = time.time() - self.start_time if self.start_time else 0.0
        summary: Dict[str, Any] = {"total_duration": total_duration, "metrics": {}}
        with self._lock:
            for key, values in self.metrics.items():
                if not values:
                    continue
                summary["metrics"][key] = {
                    "count": len(values),
                    "total": sum(values),
                    "avg": sum(values) / len(values),
                    "min": min(values),
                    "max": max(values),
                }
        return summary

    def save_results(self) -> None:
        """Write the summary to the configured JSON file."""
        if not self.enabled or not self.output_file:
            return
        try:
            with open(self.output_file, 'w') as f:
                json.dump(self.summary(), f, indent=2)
            logger.info(f"Profiling results saved to {self.output_file}")
        except OSError as e:
            logger.error(f"Failed to save profiling results: {e}")


# Global instance
profiler = Profiler()
