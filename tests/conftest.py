"""Shared fakes for clocksync tests."""

import pytest
from PIL import Image

from clocksync.errors import SourceUnavailable


class FakeVideoSource:
    """In-memory video: every seek returns a plain frame and is recorded."""

    def __init__(self, duration, name="fake.mp4", fail_at=None, color=(255, 255, 255)):
        self._duration = duration
        self.name = name
        self.fail_at = fail_at
        self.color = color
        self.seeks = []

    @property
    def duration(self):
        return self._duration

    def grab_frame(self, time, size):
        if self.fail_at is not None and len(self.seeks) >= self.fail_at:
            raise SourceUnavailable(self.name, f"seek to {time:.3f}s failed")
        self.seeks.append(time)
        return Image.new("RGB", size, self.color)


class ScriptedReader:
    """OCR reader returning a fixed sequence of texts, one per call."""

    def __init__(self, texts):
        self.texts = list(texts)
        self.calls = 0
        self.images = []
        self.closed = False

    def recognize(self, image):
        if self.closed:
            raise RuntimeError("OCR reader has already been closed")
        self.images.append(image)
        text = self.texts[self.calls] if self.calls < len(self.texts) else ""
        self.calls += 1
        return text

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


@pytest.fixture
def fake_source():
    def _create(duration=10.0, **kwargs):
        return FakeVideoSource(duration, **kwargs)

    return _create


@pytest.fixture
def scripted_reader():
    def _create(texts=()):
        return ScriptedReader(texts)

    return _create
