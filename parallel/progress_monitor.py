"""
Live progress monitor for a running search.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Observe ProgressCounters from a separate thread and render a
proportional bar at a fixed interval. Reads counters without locks and never
touches the solve path.

Key Classes/Functions:
- render_progress_bar(): Snapshot -> "[#####     ]  42.0% | found 7"
- ConsoleProgressRenderer: Writes the bar in place (carriage return)
- LoggingProgressRenderer: Logs the bar at coarse percentage steps
- ProgressMonitor: Polling thread; stops at processed == total or on stop(),
  then forces one final render

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import sys
import threading
from typing import Callable, Optional, TextIO

from Amp_Gain_Search.models.search_stats import ProgressSnapshot
from Amp_Gain_Search.parallel.result_store import ProgressCounters

logger = logging.getLogger("AmpSearch.Parallel.Progress")

COLOR_RESET = "\033[0m"
COLOR_CYAN = "\033[36m"

Renderer = Callable[[ProgressSnapshot], None]


# ═══════════════════════════════════════════════════════════════════════════
# 🎨 RENDERING
# ═══════════════════════════════════════════════════════════════════════════


def render_progress_bar(snapshot: ProgressSnapshot, width: int = 50) -> str:
    """
    Format a snapshot as a fixed-width bar.

    Args:
        snapshot: Counters to render.
        width: Number of bar cells.

    Returns:
        e.g. "[#########                    ]  30.0% | 300/1,000 | found 4"
    """
    filled = int(round(snapshot.fraction * width))
    bar = "#" * filled + " " * (width - filled)
    return (
        f"[{bar}] {snapshot.percent:5.1f}% | "
        f"{snapshot.processed:,}/{snapshot.total:,} | found {snapshot.found:,}"
    )


class ConsoleProgressRenderer:
    """Write the bar to a stream, overwriting the current line."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        width: int = 50,
        color: bool = True,
    ) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.width = width
        self.color = color
        self._finished = False

    def __call__(self, snapshot: ProgressSnapshot) -> None:
        text = render_progress_bar(snapshot, self.width)
        if self.color:
            text = f"{COLOR_CYAN}{text}{COLOR_RESET}"
        self.stream.write("\r" + text)
        if snapshot.is_complete and not self._finished:
            self.stream.write("\n")
            self._finished = True
        self.stream.flush()


class LoggingProgressRenderer:
    """Log the bar each time another `every_pct` percent is completed."""

    def __init__(self, every_pct: float = 10.0, width: int = 30) -> None:
        self.every_pct = every_pct
        self.width = width
        self._last_bucket = -1

    def __call__(self, snapshot: ProgressSnapshot) -> None:
        bucket = int(snapshot.percent // self.every_pct)
        if bucket != self._last_bucket:
            self._last_bucket = bucket
            logger.info(f"   {render_progress_bar(snapshot, self.width)}")


# ═══════════════════════════════════════════════════════════════════════════
# 👀 MONITOR THREAD
# ═══════════════════════════════════════════════════════════════════════════


class ProgressMonitor:
    """
    Independent observer polling ProgressCounters.

    Runs as a daemon thread. Terminates once processed reaches total, or when
    stop() is called (cancellation, worker failure). Always performs one
    final render before returning so the bar never freezes mid-run.

    Usage:
        monitor = ProgressMonitor(counters, ConsoleProgressRenderer())
        monitor.start()
        ...  # workers run
        monitor.stop()
    """

    def __init__(
        self,
        counters: ProgressCounters,
        render: Renderer,
        interval_s: float = 0.1,
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval_s must be > 0, got {interval_s}")
        self.counters = counters
        self.render = render
        self.interval_s = interval_s
        self.render_count = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "ProgressMonitor":
        self._thread = threading.Thread(
            target=self._run, name="amp-progress-monitor", daemon=True
        )
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Ask the thread to finish and wait for its final render."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _emit(self, snapshot: ProgressSnapshot) -> None:
        self.render_count += 1
        try:
            self.render(snapshot)
        except Exception as e:
            # A broken renderer must not take the search down with it
            logger.warning(f"⚠️ Progress renderer failed: {e}")

    def _run(self) -> None:
        while not self.counters.is_complete:
            self._emit(self.counters.snapshot())
            if self._stop_event.wait(self.interval_s):
                break
        # Final render: 100% on completion, last real value on early stop
        self._emit(self.counters.snapshot())
