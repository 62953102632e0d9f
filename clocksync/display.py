"""Progress display and result rendering using rich."""

import threading
import time
from collections import deque
from typing import Dict, Optional

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from clocksync.models import Observation, StreamResult, SyncReport, SyncResult
from clocksync.time_parser import format_clock_time

# Observations listed per stream in the final report
OBSERVATION_PREVIEW = 20


class SyncProgressDisplay:
    """Live view of sampling progress for both videos."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the display."""
        self.lock = threading.Lock()

        # State
        self.current_label: Optional[str] = None
        self.current_index = 0
        self.current_total = 0
        self.status = "Waiting..."
        self.log: deque = deque(maxlen=100)
        self.read_counts: Dict[str, int] = {}
        self.sample_counts: Dict[str, int] = {}

        # Timing
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

        # UI
        self.console = console or Console()
        self.live: Optional[Live] = None
        self.running = False
        self.display_thread: Optional[threading.Thread] = None
        self.activity_log_max_lines = 10

    def on_sample(self, label: str, index: int, total: int, observation: Optional[Observation]) -> None:
        """Progress callback for process_stream()."""
        with self.lock:
            if self.start_time is None:
                self.start_time = time.time()
            self.current_label = label
            self.current_index = index
            self.current_total = total
            self.status = f"Processing Video {label}"
            self.sample_counts[label] = self.sample_counts.get(label, 0) + 1
            if observation is not None:
                self.read_counts[label] = self.read_counts.get(label, 0) + 1
        if observation is None:
            self.add_log(f"{label} - Frame {index}: OCR failed")
        else:
            self.add_log(
                f"{label} - Frame {index}: Video {observation.video_time:.2f}s "
                f"-> Stopwatch {format_clock_time(observation.clock_time)}"
            )

    def set_status(self, status: str) -> None:
        with self.lock:
            self.status = status

    def add_log(self, message: str) -> None:
        """Add a message to the activity log."""
        with self.lock:
            self.log.append(f"[{time.strftime('%H:%M:%S')}] {message}")

    def finish(self) -> None:
        with self.lock:
            self.end_time = time.time()
            self.status = "Processing complete"

    def _get_status_pane_content(self) -> Panel:
        with self.lock:
            text = Text()
            text.append(" Processing Status ", style="bold green on dark_blue")
            text.append(" (Press Ctrl+C to cancel)\n\n", style="dim")
            text.append("Video: ", style="dim")
            text.append(f"{self.current_label or '-'}\n", style="bright_white")
            text.append("Frame: ", style="dim")
            if self.current_total:
                percent = (self.current_index + 1) / self.current_total * 100
                text.append(
                    f"{self.current_index + 1}/{self.current_total} ({percent:.0f}%)\n",
                    style="bright_white"
                )
            else:
                text.append("-\n", style="bright_white")
            text.append("Status: ", style="dim")
            text.append(f"{self.status}\n", style="bright_white")
            return Panel(text, title="Status", border_style="green")

    def _get_log_pane_content(self) -> Panel:
        with self.lock:
            text = Text()
            if self.log:
                for msg in reversed(list(self.log)[-self.activity_log_max_lines:]):
                    text.append(f"{msg}\n", style="dim")
            else:
                text.append("No activity yet...\n", style="dim")
            return Panel(text, title="Activity Log", border_style="blue")

    def _get_summary_pane_content(self) -> Panel:
        with self.lock:
            text = Text()
            for label in sorted(self.sample_counts):
                read = self.read_counts.get(label, 0)
                sampled = self.sample_counts[label]
                text.append(f"Video {label}: ", style="dim")
                text.append(f"{read}/{sampled} read\n", style="green" if read else "red")
            if not self.sample_counts:
                text.append("No frames sampled yet...\n", style="dim")
            if self.start_time is not None:
                elapsed = (self.end_time or time.time()) - self.start_time
                text.append("Elapsed: ", style="dim")
                text.append(f"{elapsed:.1f}s\n", style="bright_white")
            return Panel(text, title="Timestamps", border_style="cyan")

    def _create_layout(self) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(self._get_status_pane_content(), size=8),
            Layout(self._get_log_pane_content(), size=self.activity_log_max_lines + 2),
            Layout(self._get_summary_pane_content())
        )
        return layout

    def start(self) -> None:
        """Start refreshing the display in a background thread."""
        def run_display():
            self.running = True
            try:
                with Live(self._create_layout(), refresh_per_second=4, screen=False, console=self.console) as live:
                    self.live = live
                    while self.running:
                        live.update(self._create_layout())
                        time.sleep(0.25)
            finally:
                self.running = False

        self.display_thread = threading.Thread(target=run_display, daemon=True)
        self.display_thread.start()

    def stop(self) -> None:
        """Stop the display and wait for the refresh thread to exit."""
        self.running = False
        if self.display_thread is not None:
            self.display_thread.join(timeout=2.0)
            self.display_thread = None


def _stream_table(stream: StreamResult) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value", style="bright_white")
    table.add_row("Duration", f"{stream.duration:.2f}s")
    table.add_row("FPS", f"{stream.nominal_fps:.2f}")
    table.add_row("Timestamps Detected", str(len(stream.observations)))
    table.add_row("Detection Rate", f"{stream.detection_rate * 100:.1f}%")
    return table


def _sync_panel(result: SyncResult) -> Panel:
    start_a, start_b = result.start_positions()
    if result.low_confidence:
        confidence = "[red]Low (no matching timestamps, offset defaulted to 0)[/red]"
    else:
        confidence = f"[green]{result.match_count} matching points[/green]"
    sign = "+" if result.offset >= 0 else ""
    body = (
        f"[bold cyan]Sync Offset:[/bold cyan] {sign}{result.offset:.4f}s\n"
        f"[dim]Direction:[/dim] {result.direction}\n"
        f"[dim]Confidence:[/dim] {confidence}\n"
        f"[dim]Mean / Median / Std:[/dim] {result.mean:.4f}s / {result.median:.4f}s / {result.std_dev:.4f}s\n"
        f"[dim]Start playback at:[/dim] A {start_a:.3f}s, B {start_b:.3f}s"
    )
    return Panel(body, title="[bold]Synchronization[/bold]", border_style="red" if result.low_confidence else "cyan")


def _observation_table(stream: StreamResult) -> Table:
    table = Table(show_header=True, header_style="bold cyan", border_style="dim", title=f"Video {stream.label}")
    table.add_column("Frame", justify="right")
    table.add_column("Video", justify="right", style="yellow")
    table.add_column("Stopwatch", justify="right", style="green")
    for obs in stream.observations[:OBSERVATION_PREVIEW]:
        table.add_row(str(obs.frame_index), f"{obs.video_time:.3f}s", format_clock_time(obs.clock_time))
    if not stream.observations:
        table.add_row("-", "[red][No timestamps read][/red]", "")
    return table


def print_report(report: SyncReport, console: Optional[Console] = None) -> None:
    """Print stream statistics, the offset and the first observations of each stream."""
    console = console or Console()
    console.print()
    for stream in (report.stream_a, report.stream_b):
        console.print(Panel(_stream_table(stream), title=f"[bold]Video {stream.label}[/bold]", border_style="dim"))
    console.print(_sync_panel(report.result))
    console.print()
    console.print(_observation_table(report.stream_a))
    console.print(_observation_table(report.stream_b))
    console.print()
