import pytest

from clocksync.models import CandidateMatch, Observation, StreamResult, SyncResult


def test_observation_is_immutable():
    obs = Observation(frame_index=0, video_time=0.0, clock_time=1.0)
    with pytest.raises(AttributeError):
        obs.clock_time = 2.0


def test_observation_rejects_negative_values():
    with pytest.raises(ValueError):
        Observation(frame_index=-1, video_time=0.0, clock_time=0.0)
    with pytest.raises(ValueError):
        Observation(frame_index=0, video_time=-0.1, clock_time=0.0)
    with pytest.raises(ValueError):
        Observation(frame_index=0, video_time=0.0, clock_time=-1.0)


def test_candidate_match_offset_sign():
    match = CandidateMatch(
        Observation(frame_index=60, video_time=2.0, clock_time=11.0),
        Observation(frame_index=48, video_time=1.6, clock_time=11.02),
    )
    assert match.offset == pytest.approx(0.4)
    assert match.clock_diff == pytest.approx(0.02)


def test_unreliable_result():
    result = SyncResult.unreliable()
    assert result.offset == 0
    assert result.match_count == 0
    assert result.low_confidence


def test_start_positions_positive_offset():
    result = SyncResult(offset=1.5, match_count=3, mean=1.5, median=1.5, std_dev=0.0)
    assert result.start_positions() == (0.0, 1.5)
    assert result.direction == "Video B ahead"


def test_start_positions_negative_offset():
    result = SyncResult(offset=-0.75, match_count=3, mean=-0.75, median=-0.75, std_dev=0.0)
    assert result.start_positions() == (0.75, 0.0)
    assert result.direction == "Video A ahead"


def test_detection_rate():
    obs = Observation(frame_index=0, video_time=0.0, clock_time=0.0)
    assert StreamResult("A", 30.0, 10.0, (obs,), samples_attempted=4).detection_rate == 0.25
    assert StreamResult("A", 30.0, 0.0).detection_rate == 0.0


def test_sync_result_offset_is_the_median():
    with pytest.raises(ValueError):
        SyncResult(offset=1.0, match_count=3, mean=1.0, median=1.2, std_dev=0.1)


def test_sync_result_rejects_negative_match_count():
    with pytest.raises(ValueError):
        SyncResult(offset=0.0, match_count=-1, mean=0.0, median=0.0, std_dev=0.0, low_confidence=True)


def test_sync_result_without_matches_is_unreliable():
    with pytest.raises(ValueError):
        SyncResult(offset=0.0, match_count=0, mean=0.0, median=0.0, std_dev=0.0)
    with pytest.raises(ValueError):
        SyncResult(offset=0.5, match_count=0, mean=0.5, median=0.5, std_dev=0.0, low_confidence=True)
