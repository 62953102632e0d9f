"""Exceptions raised by the clock synchronization pipeline."""


class ClockSyncError(RuntimeError):
    """Base class for failures that abort a synchronization run."""


class SourceUnavailable(ClockSyncError):
    """A video could not be probed, seeked or decoded."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Video unavailable: {source} ({reason})")


class OCRUnavailable(ClockSyncError):
    """The OCR engine could not be initialized."""
