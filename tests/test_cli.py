import json

import pytest
from PIL import Image

from clocksync import cli
from clocksync.errors import SourceUnavailable
from clocksync.models import Observation, StreamResult, SyncReport, SyncResult


class FixedReader:
    def __init__(self, text):
        self.text = text
        self.closed = False

    def recognize(self, image):
        return self.text

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def _report(offset=0.5, low_confidence=False):
    obs = Observation(frame_index=0, video_time=0.0, clock_time=10.0)
    stream_a = StreamResult("A", 30.0, 2.0, (obs,), samples_attempted=2)
    stream_b = StreamResult("B", 30.0, 2.0, (obs,), samples_attempted=2)
    if low_confidence:
        result = SyncResult.unreliable()
    else:
        result = SyncResult(offset=offset, match_count=1, mean=offset, median=offset, std_dev=0.0)
    return SyncReport(result=result, stream_a=stream_a, stream_b=stream_b)


def test_read_image(tmp_path, monkeypatch, capsys):
    path = tmp_path / "frame.png"
    Image.new("RGB", (1280, 720), (255, 255, 255)).save(path)
    reader = FixedReader("OO:OO:l2.345")
    monkeypatch.setattr(cli, "default_reader_factory", lambda config: reader)

    region_path = tmp_path / "region.png"
    assert cli.main(["read", str(path), "--save-region", str(region_path)]) == 0

    out = capsys.readouterr().out
    assert "00:00:12.345" in out
    assert region_path.exists()
    assert reader.closed


def test_read_image_without_clock(tmp_path, monkeypatch):
    path = tmp_path / "frame.png"
    Image.new("RGB", (1920, 1080)).save(path)
    monkeypatch.setattr(cli, "default_reader_factory", lambda config: FixedReader(""))
    assert cli.main(["read", str(path)]) == 1


def test_read_missing_file(tmp_path):
    assert cli.main(["read", str(tmp_path / "missing.png")]) == 1


def test_sync_writes_report(tmp_path, monkeypatch):
    captured = {}

    def fake_run_sync(video_a, video_b, config, progress=None):
        captured["config"] = config
        captured["videos"] = (video_a, video_b)
        return _report(offset=0.5)

    monkeypatch.setattr(cli, "run_sync", fake_run_sync)
    report_path = tmp_path / "sync.json"

    status = cli.main([
        "sync", "a.mp4", "b.mp4", "--no-display",
        "--tolerance", "0.1", "--max-samples", "30",
        "--report", str(report_path),
    ])

    assert status == 0
    assert captured["videos"] == ("a.mp4", "b.mp4")
    assert captured["config"].tolerance == 0.1
    assert captured["config"].max_samples == 30
    data = json.loads(report_path.read_text())
    assert data["sync"]["offset"] == 0.5
    assert data["sync"]["start_b"] == 0.5


def test_sync_low_confidence_exit_status(monkeypatch):
    monkeypatch.setattr(cli, "run_sync", lambda *args, **kwargs: _report(low_confidence=True))
    assert cli.main(["sync", "a.mp4", "b.mp4", "--no-display"]) == cli.EXIT_NO_CORRESPONDENCE


def test_sync_source_error(monkeypatch, capsys):
    def failing_run_sync(*args, **kwargs):
        raise SourceUnavailable("a.mp4", "file not found")

    monkeypatch.setattr(cli, "run_sync", failing_run_sync)
    assert cli.main(["sync", "a.mp4", "b.mp4", "--no-display"]) == 1
    assert "a.mp4" in capsys.readouterr().err


def test_config_file_and_flags(tmp_path):
    path = tmp_path / "sync.json"
    path.write_text(json.dumps({"sync": {"tolerance": 0.3, "max_samples": 20}}))
    args = cli.build_parser().parse_args(["sync", "a.mp4", "b.mp4", "--config", str(path), "--max-samples", "40"])
    config = cli._build_config(args)
    assert config.tolerance == 0.3
    assert config.max_samples == 40


def test_requires_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_fractional_sample_cap_in_config_file(tmp_path, capsys):
    path = tmp_path / "sync.json"
    path.write_text(json.dumps({"max_samples": 60.5}))
    assert cli.main(["sync", "a.mp4", "b.mp4", "--config", str(path), "--no-display"]) == 1
    assert "max_samples" in capsys.readouterr().err
