"""
Unit tests for shared run state and the progress monitor.

Tests:
1. ResultStore appends from many threads without losing solutions
2. ProgressCounters add/snapshot and completion
3. SharedCursor hands out every index exactly once
4. render_progress_bar() formatting
5. ProgressMonitor stops on completion or stop() with a final render

Run with: python -m pytest _tests/test_result_store.py -v
"""

import io
import threading

import pytest

from Amp_Gain_Search.config_types import SearchConfig
from Amp_Gain_Search.models.data_models import Combination, GainRange, Stage
from Amp_Gain_Search.models.search_stats import ProgressSnapshot
from Amp_Gain_Search.parallel.progress_monitor import (
    ConsoleProgressRenderer,
    LoggingProgressRenderer,
    ProgressMonitor,
    render_progress_bar,
)
from Amp_Gain_Search.parallel.result_store import (
    ProgressCounters,
    ResultStore,
    SharedCursor,
)
from Amp_Gain_Search.solvers.feasibility import evaluate_combination


@pytest.fixture
def solution():
    config = SearchConfig(x1=1.0, x2=4.0, v_min=2.0, v_max=8.0, workers=1)
    combo = Combination(
        stage1=GainRange(Stage.FIRST, 1.0, 2.0),
        stage2=GainRange(Stage.SECOND, 2.0, 3.0),
    )
    return evaluate_combination(combo, config)[0]


class TestResultStore:
    """Test the append-only store."""

    def test_append_and_extend(self, solution):
        store = ResultStore()
        store.append(solution)
        assert store.extend([solution, solution]) == 2
        assert store.extend([]) == 0
        assert len(store) == 3
        assert store.solutions() == (solution, solution, solution)

    def test_concurrent_appends(self, solution):
        """No solution is lost when 8 threads append at once."""
        store = ResultStore()

        def worker():
            for _ in range(500):
                store.append(solution)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store.solutions()) == 4000


class TestProgressCounters:
    """Test processed/found counters."""

    def test_add_and_snapshot(self):
        counters = ProgressCounters(total=10)
        counters.add(processed=4, found=1)
        counters.add(processed=6)
        snap = counters.snapshot()
        assert (snap.processed, snap.total, snap.found) == (10, 10, 1)
        assert counters.is_complete

    def test_concurrent_adds(self):
        counters = ProgressCounters(total=8000)

        def worker():
            for _ in range(1000):
                counters.add(processed=1, found=1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert counters.processed == 8000
        assert counters.found == 8000

    def test_negative_total_rejected(self):
        with pytest.raises(ValueError):
            ProgressCounters(total=-1)

    def test_empty_search_is_complete(self):
        snap = ProgressCounters(total=0).snapshot()
        assert snap.is_complete
        assert snap.fraction == 1.0


class TestSharedCursor:
    """Test atomic batch claiming."""

    def test_sequential_claims(self):
        cursor = SharedCursor(total=10, batch_size=4)
        assert cursor.claim() == (0, 4)
        assert cursor.claim() == (4, 8)
        assert cursor.claim() == (8, 10)
        assert cursor.claim() is None
        assert cursor.position == 10

    def test_concurrent_claims_cover_range_once(self):
        cursor = SharedCursor(total=10_000, batch_size=7)
        claimed = []
        lock = threading.Lock()

        def worker():
            while True:
                batch = cursor.claim()
                if batch is None:
                    return
                with lock:
                    claimed.append(batch)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        indices = sorted(i for start, stop in claimed for i in range(start, stop))
        assert indices == list(range(10_000))

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            SharedCursor(total=10, batch_size=0)


class TestProgressRendering:
    """Test bar formatting and renderers."""

    def test_bar_proportional(self):
        text = render_progress_bar(ProgressSnapshot(300, 1000, 4), width=10)
        assert text.startswith("[###       ]")
        assert "30.0%" in text
        assert "300/1,000" in text
        assert "found 4" in text

    def test_bar_empty_search_is_full(self):
        text = render_progress_bar(ProgressSnapshot(0, 0, 0), width=4)
        assert text.startswith("[####]")
        assert "100.0%" in text

    def test_console_renderer_finishes_line_once(self):
        stream = io.StringIO()
        render = ConsoleProgressRenderer(stream=stream, width=10, color=False)
        render(ProgressSnapshot(5, 10, 0))
        render(ProgressSnapshot(10, 10, 1))
        render(ProgressSnapshot(10, 10, 1))
        output = stream.getvalue()
        assert output.count("\n") == 1
        assert output.count("\r") == 3

    def test_logging_renderer_buckets(self, caplog):
        render = LoggingProgressRenderer(every_pct=50)
        with caplog.at_level("INFO", logger="AmpSearch.Parallel.Progress"):
            for processed in (0, 10, 20, 60, 70, 100):
                render(ProgressSnapshot(processed, 100, 0))
        # buckets 0, 1 (>= 50%) and 2 (100%)
        assert len(caplog.records) == 3


class TestProgressMonitor:
    """Test the polling thread."""

    def test_stops_when_complete(self):
        counters = ProgressCounters(total=5)
        seen = []
        monitor = ProgressMonitor(counters, seen.append, interval_s=0.01).start()
        counters.add(processed=5)
        monitor.stop()
        assert not monitor.is_running
        assert seen[-1].processed == 5
        assert seen[-1].is_complete

    def test_stop_before_completion_renders_last_value(self):
        counters = ProgressCounters(total=100)
        counters.add(processed=42)
        seen = []
        monitor = ProgressMonitor(counters, seen.append, interval_s=0.01).start()
        monitor.stop()
        assert not monitor.is_running
        assert seen
        assert seen[-1].processed == 42

    def test_failing_renderer_does_not_kill_monitor(self):
        counters = ProgressCounters(total=1)

        def broken(_snapshot):
            raise RuntimeError("terminal closed")

        monitor = ProgressMonitor(counters, broken, interval_s=0.01).start()
        counters.add(processed=1)
        monitor.stop()
        assert monitor.render_count >= 1

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            ProgressMonitor(ProgressCounters(total=1), lambda s: None, interval_s=0)
