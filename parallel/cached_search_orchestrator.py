"""
Cached wrapper for the gain search.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Add a caching layer around GainSearchEngine.run().
Checks the on-disk result cache first and only searches on a miss.

Usage:
    # Instead of:
    from Amp_Gain_Search.parallel.search_orchestrator import run_gain_search

    # Use:
    from Amp_Gain_Search.parallel.cached_search_orchestrator import (
        run_cached_search,
    )

Only complete runs are cached; a cancelled run holds a partial solution set
and is never written.

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from Amp_Gain_Search.config_types import AppConfig, SearchConfig
from Amp_Gain_Search.models.search_stats import ProgressSnapshot, SearchResult
from Amp_Gain_Search.parallel.progress_monitor import Renderer
from Amp_Gain_Search.parallel.result_cache import (
    compute_cache_fingerprint,
    get_cache_stats,
    load_from_cache,
    prune_old_cache,
    save_to_cache,
)
from Amp_Gain_Search.parallel.search_orchestrator import GainSearchEngine

logger = logging.getLogger("AmpSearch.Parallel.CachedOrchestrator")


# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ CONFIG NORMALIZATION
# ═══════════════════════════════════════════════════════════════════════════


def _normalize_config(config: Union[Dict[str, Any], AppConfig]) -> AppConfig:
    """
    Normalize config to AppConfig for internal use.

    Args:
        config: Either raw CONFIG dict or AppConfig object.

    Returns:
        AppConfig instance for typed access.
    """
    if isinstance(config, AppConfig):
        return config
    return AppConfig.from_dict(config)


def _get_cache_settings(app_config: AppConfig) -> Tuple[bool, bool]:
    """
    Extract cache settings from config.

    Returns:
        Tuple of (cache_enabled, force_overwrite).
    """
    cache_enabled = app_config.cache.enabled
    force_overwrite = app_config.cache.force_overwrite

    if app_config.testing_mode.enabled and app_config.testing_mode.force_cache_overwrite:
        force_overwrite = True
        logger.info("🧪 Testing mode: force_cache_overwrite enabled")

    return cache_enabled, force_overwrite


# ═══════════════════════════════════════════════════════════════════════════
# 🔑 CACHE HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _result_from_cache(
    solutions: tuple,
    metadata: Dict[str, Any],
    search: SearchConfig,
    elapsed: float,
) -> SearchResult:
    """Rebuild a SearchResult around cached solutions."""
    total = int(metadata.get("total", 0))
    return SearchResult(
        solutions=solutions,
        snapshot=ProgressSnapshot(processed=total, total=total, found=len(solutions)),
        n_workers=search.workers,
        duration_seconds=elapsed,
        cancelled=False,
        from_cache=True,
        stats=dict(metadata.get("stats", {})),
    )


def _save_and_prune_cache(
    cache_dir: Path,
    fingerprint: str,
    result: SearchResult,
    app_config: AppConfig,
) -> None:
    metadata = {
        "total": result.snapshot.total,
        "computation_time_s": round(result.duration_seconds, 2),
        "solution_count": result.solution_count,
        "stats": result.stats,
    }
    save_to_cache(
        cache_dir,
        fingerprint,
        result.solutions,
        metadata,
        lock_timeout_s=app_config.cache.lock_timeout_s,
    )
    prune_old_cache(cache_dir, max_entries=app_config.cache.max_cache_entries)


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 CACHED SEARCH ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════


def run_cached_search(
    config: Union[Dict[str, Any], AppConfig],
    renderer: Optional[Renderer] = None,
) -> SearchResult:
    """
    Run the gain search WITH CACHING.

    1. Computes a fingerprint of the search problem and solver settings
    2. Returns cached solutions on hit
    3. Runs the engine on miss and caches a complete result

    Args:
        config: Full CONFIG dict or AppConfig object.
        renderer: Optional progress renderer for the engine.

    Returns:
        SearchResult (from_cache=True on a cache hit).
    """
    app_config = _normalize_config(config)
    search = app_config.effective_search()
    cache_enabled, force_overwrite = _get_cache_settings(app_config)

    engine = GainSearchEngine(
        search,
        feasibility=app_config.feasibility,
        parallel=app_config.parallel,
        progress=app_config.progress,
        renderer=renderer,
    )

    if not cache_enabled:
        logger.info("💾 Result cache disabled")
        return engine.run()

    cache_dir = app_config.cache.cache_path
    fingerprint = compute_cache_fingerprint(search, app_config.feasibility)

    logger.info("=" * 60)
    logger.info("🔍 CHECKING RESULT CACHE")
    logger.info("=" * 60)
    logger.info(f"   Fingerprint: {fingerprint}")

    stats = get_cache_stats(cache_dir)
    if stats["exists"]:
        logger.info(
            f"   Cache entries: {stats['entries']} ({stats['total_size_mb']} MB)"
        )

    if force_overwrite:
        logger.info("   ⚠️ FORCE OVERWRITE enabled - will recompute and overwrite cache")
    else:
        load_start = time.perf_counter()
        cached = load_from_cache(
            cache_dir, fingerprint, lock_timeout_s=app_config.cache.lock_timeout_s
        )
        if cached is not None:
            solutions, metadata = cached
            return _result_from_cache(
                solutions, metadata, search, time.perf_counter() - load_start
            )

    result = engine.run()
    if result.cancelled:
        logger.info("   ⏭️ Run cancelled; result not cached")
    else:
        _save_and_prune_cache(cache_dir, fingerprint, result, app_config)
    return result


__all__ = ["run_cached_search"]
