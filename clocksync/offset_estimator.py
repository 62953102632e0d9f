"""Estimate the offset between two streams from matching clock readings."""

import logging
import math
from typing import List, Tuple

from clocksync.models import CandidateMatch, StreamResult, SyncResult

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.2


def find_candidate_matches(
    stream_a: StreamResult,
    stream_b: StreamResult,
    tolerance: float = DEFAULT_TOLERANCE
) -> List[CandidateMatch]:
    """
    Pair every observation of A with every observation of B whose clock time
    is within `tolerance` seconds.

    This compares all pairs, O(len(A) * len(B)); fine for the bounded sample
    counts used here (at most a few dozen per stream). An observation can take
    part in several matches. Order is A's order, then B's order within each A.
    """
    matches = []
    for obs_a in stream_a.observations:
        for obs_b in stream_b.observations:
            if abs(obs_a.clock_time - obs_b.clock_time) < tolerance:
                match = CandidateMatch(obs_a, obs_b)
                matches.append(match)
                logger.debug(
                    f"Match found: Stopwatch {obs_a.clock_time:.3f}s, "
                    f"Video A at {obs_a.video_time:.3f}s, Video B at {obs_b.video_time:.3f}s, "
                    f"Offset: {match.offset:.4f}s"
                )
    return matches


def summarize_offsets(offsets: List[float]) -> SyncResult:
    """
    Reduce candidate offsets to a SyncResult.

    The offset is the value at index floor(n/2) of the sorted offsets (the
    upper of the two middle values for even n), so a few spurious matches do
    not move it. Mean and population standard deviation describe the spread.
    """
    if not offsets:
        return SyncResult.unreliable()

    ordered = sorted(offsets)
    median = ordered[len(ordered) // 2]
    mean = sum(ordered) / len(ordered)
    std_dev = math.sqrt(sum((x - mean) ** 2 for x in ordered) / len(ordered))
    return SyncResult(
        offset=median,
        match_count=len(ordered),
        mean=mean,
        median=median,
        std_dev=std_dev,
        low_confidence=False
    )


def match_streams(
    stream_a: StreamResult,
    stream_b: StreamResult,
    tolerance: float = DEFAULT_TOLERANCE
) -> Tuple[List[CandidateMatch], SyncResult]:
    """Find candidate matches and summarize them; returns (matches, result)."""
    logger.info(
        f"Calculating sync offset: {len(stream_a.observations)} timestamps in A, "
        f"{len(stream_b.observations)} in B"
    )
    matches = find_candidate_matches(stream_a, stream_b, tolerance)
    result = summarize_offsets([m.offset for m in matches])

    if result.low_confidence:
        logger.warning("No matches found! Check that both videos show the same stopwatch time range.")
    else:
        logger.info(
            f"Offset statistics: {result.match_count} matches, Mean={result.mean:.4f}s, "
            f"Median={result.median:.4f}s, Std={result.std_dev:.4f}s"
        )
    return matches, result


def estimate_offset(
    stream_a: StreamResult,
    stream_b: StreamResult,
    tolerance: float = DEFAULT_TOLERANCE
) -> SyncResult:
    """
    Estimate how far stream A lags stream B.

    A positive offset means the same clock reading shows up later in A than in
    B. With no matches at all the offset is 0 and the result is flagged
    low-confidence.
    """
    _, result = match_streams(stream_a, stream_b, tolerance)
    return result
