"""
Result Cache Tests: fingerprinting, pickle I/O and the cached orchestrator

Tests:
1. Fingerprint is deterministic, ignores workers, tracks problem and modes
2. save_to_cache() / load_from_cache() round trip and misses
3. Corrupted entries are deleted and reported as misses
4. prune_old_cache() / invalidate_cache() / get_cache_stats()
5. run_cached_search() hit, disabled cache and forced overwrite

Run with: python -m pytest _tests/test_result_cache.py -v
"""

import os

import pytest

from Amp_Gain_Search.config_types import AppConfig, SearchConfig
from Amp_Gain_Search.parallel.cached_search_orchestrator import run_cached_search
from Amp_Gain_Search.parallel.result_cache import (
    MANIFEST_NAME,
    compute_cache_fingerprint,
    get_cache_path,
    get_cache_stats,
    invalidate_cache,
    load_from_cache,
    prune_old_cache,
    save_to_cache,
)
from Amp_Gain_Search.parallel.search_orchestrator import run_gain_search
from Amp_Gain_Search.solvers.solver_config import FeasibilityConfig, create_fast_config


# ============================================================================
# FIXTURES
# ============================================================================


def _search(**overrides) -> SearchConfig:
    base = dict(x1=1.0, x2=4.0, v_min=2.0, v_max=8.0, step=1.0, workers=1)
    base.update(overrides)
    return SearchConfig(**base)


def _app_config(tmp_path, cache=None, testing=None) -> AppConfig:
    cache_section = {"enabled": True, "cache_dir": str(tmp_path / "cache")}
    cache_section.update(cache or {})
    return AppConfig.from_dict(
        {
            "search": _search(workers=2).as_dict(),
            "progress": {"enabled": False},
            "cache": cache_section,
            "testing_mode": testing or {"enabled": False},
        }
    )


@pytest.fixture(scope="module")
def solutions():
    return run_gain_search(_search()).solutions


# ============================================================================
# FINGERPRINT
# ============================================================================


class TestFingerprint:
    """compute_cache_fingerprint()."""

    def test_deterministic(self):
        feasibility = FeasibilityConfig()
        assert compute_cache_fingerprint(
            _search(), feasibility
        ) == compute_cache_fingerprint(_search(), feasibility)

    def test_ignores_workers(self):
        feasibility = FeasibilityConfig()
        assert compute_cache_fingerprint(
            _search(workers=1), feasibility
        ) == compute_cache_fingerprint(_search(workers=8), feasibility)

    @pytest.mark.parametrize(
        "overrides", [{"step": 0.5}, {"x2": 5.0}, {"v_min": 1.0}, {"max_gain": 6.0}]
    )
    def test_tracks_problem(self, overrides):
        feasibility = FeasibilityConfig()
        assert compute_cache_fingerprint(
            _search(), feasibility
        ) != compute_cache_fingerprint(_search(**overrides), feasibility)

    def test_tracks_modes(self):
        assert compute_cache_fingerprint(
            _search(), FeasibilityConfig()
        ) != compute_cache_fingerprint(_search(), create_fast_config())

    def test_int_and_float_inputs_match(self):
        feasibility = FeasibilityConfig()
        as_ints = SearchConfig(x1=1, x2=4, v_min=2, v_max=8, step=1, workers=1)
        assert compute_cache_fingerprint(
            as_ints, feasibility
        ) == compute_cache_fingerprint(_search(), feasibility)

    def test_length(self):
        assert len(compute_cache_fingerprint(_search(), FeasibilityConfig())) == 16


# ============================================================================
# CACHE I/O
# ============================================================================


class TestCacheIO:
    """Pickle save / load."""

    def test_round_trip(self, tmp_path, solutions):
        assert save_to_cache(tmp_path, "abc123", solutions, {"total": 784})
        loaded = load_from_cache(tmp_path, "abc123")
        assert loaded is not None
        cached_solutions, metadata = loaded
        assert cached_solutions == tuple(solutions)
        assert metadata == {"total": 784}

    def test_manifest_written(self, tmp_path, solutions):
        save_to_cache(tmp_path, "abc123", solutions)
        assert (tmp_path / MANIFEST_NAME).exists()

    def test_miss(self, tmp_path):
        assert load_from_cache(tmp_path, "missing") is None

    def test_corrupted_entry_deleted(self, tmp_path):
        path = get_cache_path(tmp_path, "broken")
        path.write_bytes(b"not a pickle")
        assert load_from_cache(tmp_path, "broken") is None
        assert not path.exists()


class TestCacheMaintenance:
    """Pruning, invalidation and stats."""

    def _fill(self, cache_dir, solutions, count):
        for i in range(count):
            save_to_cache(cache_dir, f"fp{i}", solutions)
            os.utime(get_cache_path(cache_dir, f"fp{i}"), (1000 + i, 1000 + i))

    def test_prune_keeps_newest(self, tmp_path, solutions):
        self._fill(tmp_path, solutions, 5)
        assert prune_old_cache(tmp_path, max_entries=2) == 3
        assert not get_cache_path(tmp_path, "fp0").exists()
        assert get_cache_path(tmp_path, "fp4").exists()

    def test_prune_missing_dir(self, tmp_path):
        assert prune_old_cache(tmp_path / "nope") == 0

    def test_invalidate_one(self, tmp_path, solutions):
        self._fill(tmp_path, solutions, 3)
        assert invalidate_cache(tmp_path, "fp1") == 1
        assert get_cache_stats(tmp_path)["entries"] == 2

    def test_invalidate_all(self, tmp_path, solutions):
        self._fill(tmp_path, solutions, 3)
        assert invalidate_cache(tmp_path) == 3
        assert get_cache_stats(tmp_path)["entries"] == 0

    def test_stats_missing_dir(self, tmp_path):
        stats = get_cache_stats(tmp_path / "nope")
        assert stats["exists"] is False
        assert stats["entries"] == 0


# ============================================================================
# CACHED ORCHESTRATOR
# ============================================================================


class TestCachedSearch:
    """run_cached_search()."""

    def test_second_run_hits_cache(self, tmp_path):
        app_config = _app_config(tmp_path)
        first = run_cached_search(app_config)
        second = run_cached_search(app_config)
        assert not first.from_cache
        assert second.from_cache
        assert second.sorted_solutions() == first.sorted_solutions()
        assert second.snapshot == first.snapshot

    def test_disabled_cache_writes_nothing(self, tmp_path):
        app_config = _app_config(tmp_path, cache={"enabled": False})
        result = run_cached_search(app_config)
        assert not result.from_cache
        assert not (tmp_path / "cache").exists()

    def test_force_overwrite_recomputes(self, tmp_path):
        run_cached_search(_app_config(tmp_path))
        result = run_cached_search(_app_config(tmp_path, cache={"force_overwrite": True}))
        assert not result.from_cache

    def test_testing_mode_forces_overwrite(self, tmp_path):
        testing = {"enabled": True, "step_override": None, "force_cache_overwrite": True}
        run_cached_search(_app_config(tmp_path, testing=testing))
        result = run_cached_search(_app_config(tmp_path, testing=testing))
        assert not result.from_cache

    def test_accepts_plain_dict(self, tmp_path):
        config = {
            "search": _search().as_dict(),
            "progress": {"enabled": False},
            "cache": {"enabled": False},
        }
        assert run_cached_search(config).solution_count > 0
