"""clocksync - Align two videos by reading a shared on-screen stopwatch with OCR."""

__version__ = "1.0.0"

from clocksync.config import SyncConfig, load_config
from clocksync.errors import ClockSyncError, OCRUnavailable, SourceUnavailable
from clocksync.frame_sampler import FFmpegVideoSource, compute_sample_points, sample_frames
from clocksync.models import CandidateMatch, Observation, SamplePoint, StreamResult, SyncReport, SyncResult
from clocksync.ocr_engine import ClockReader, create_reader
from clocksync.offset_estimator import estimate_offset, find_candidate_matches
from clocksync.pipeline import run_sync
from clocksync.region import isolate_region
from clocksync.stream_processor import process_stream
from clocksync.time_parser import correct_confusions, format_clock_time, parse_clock_time

__all__ = [
    'SyncConfig',
    'load_config',
    'ClockSyncError',
    'OCRUnavailable',
    'SourceUnavailable',
    'FFmpegVideoSource',
    'compute_sample_points',
    'sample_frames',
    'CandidateMatch',
    'Observation',
    'SamplePoint',
    'StreamResult',
    'SyncReport',
    'SyncResult',
    'ClockReader',
    'create_reader',
    'estimate_offset',
    'find_candidate_matches',
    'run_sync',
    'isolate_region',
    'process_stream',
    'correct_confusions',
    'format_clock_time',
    'parse_clock_time',
]
