"""
Search Result Cache Module

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Persist completed search results to disk.
Enables skipping a full search when the same problem is run again.

Key Functions:
- compute_cache_fingerprint(): Deterministic hash of result-affecting inputs
- load_from_cache(): Load cached solutions if present and valid
- save_to_cache(): Persist solutions to the cache directory
- prune_old_cache(): Keep only the newest entries
- invalidate_cache(): Clear specific or all cached results
- get_cache_stats(): Report cache status for logging

Cache Format:
- Pickle files keyed by SHA256 fingerprint
- Per-entry filelock so concurrent runs never read a half-written file
- JSON manifest for human-readable cache registry

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import hashlib
import json
import logging
import pickle
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import filelock

from Amp_Gain_Search.config_types import SearchConfig
from Amp_Gain_Search.models.data_models import Solution
from Amp_Gain_Search.solvers.solver_config import FeasibilityConfig

logger = logging.getLogger("AmpSearch.Parallel.Cache")

CACHE_VERSION = "1.0"
CACHE_PREFIX = "amp_search_"
MANIFEST_NAME = "cache_manifest.json"


# ═══════════════════════════════════════════════════════════════════════════
# 🔑 FINGERPRINT COMPUTATION
# ═══════════════════════════════════════════════════════════════════════════


def compute_cache_fingerprint(
    search_config: SearchConfig,
    feasibility: FeasibilityConfig,
) -> str:
    """
    Compute deterministic fingerprint from all cache-affecting inputs.

    The solution set depends on the search problem and the solver settings,
    not on the worker count or dispatch mode, so those are left out and a
    1-worker run can serve a 16-worker request.

    Args:
        search_config: Search problem.
        feasibility: Solver settings.

    Returns:
        SHA256 hex string (first 16 chars for readability)
    """
    hasher = hashlib.sha256()

    problem = search_config.as_dict()
    problem.pop("workers", None)
    # 1 and 1.0 describe the same problem
    problem = {k: None if v is None else float(v) for k, v in problem.items()}
    hasher.update(json.dumps(problem, sort_keys=True).encode("utf-8"))

    solver = {
        "epsilon": float(feasibility.epsilon),
        "assignment_mode": feasibility.assignment_mode,
        "report_mode": feasibility.report_mode,
    }
    hasher.update(json.dumps(solver, sort_keys=True).encode("utf-8"))
    hasher.update(f"version:{CACHE_VERSION}".encode("utf-8"))

    return hasher.hexdigest()[:16]


# ═══════════════════════════════════════════════════════════════════════════
# 💾 CACHE I/O
# ═══════════════════════════════════════════════════════════════════════════


def get_cache_path(cache_dir: Path, fingerprint: str) -> Path:
    """Path of the pickle file for a fingerprint (may not exist yet)."""
    return cache_dir / f"{CACHE_PREFIX}{fingerprint}.pkl"


def _get_lock(cache_dir: Path, fingerprint: str, timeout_s: float) -> filelock.FileLock:
    return filelock.FileLock(
        str(cache_dir / f"{CACHE_PREFIX}{fingerprint}.lock"), timeout=timeout_s
    )


def load_from_cache(
    cache_dir: Path,
    fingerprint: str,
    lock_timeout_s: float = 30.0,
) -> Optional[Tuple[Tuple[Solution, ...], Dict[str, Any]]]:
    """
    Load cached solutions if valid.

    Returns None on any problem (missing file, lock timeout, corruption,
    wrong format). Corrupted files are deleted.

    Args:
        cache_dir: Cache directory path
        fingerprint: Cache key fingerprint
        lock_timeout_s: Seconds to wait for a concurrent writer

    Returns:
        (solutions, metadata) or None on a cache miss
    """
    cache_path = get_cache_path(cache_dir, fingerprint)
    if not cache_path.exists():
        logger.info(f"   ❌ Cache miss: {fingerprint}")
        return None

    try:
        with _get_lock(cache_dir, fingerprint, lock_timeout_s):
            with open(cache_path, "rb") as f:
                cached_data = pickle.load(f)
    except filelock.Timeout:
        logger.warning(f"   ⚠️ Cache lock timeout ({fingerprint}); recomputing")
        return None
    except (OSError, pickle.UnpicklingError, EOFError, AttributeError) as e:
        logger.warning(f"   ⚠️ Cache corrupted ({fingerprint}): {e}")
        cache_path.unlink(missing_ok=True)
        return None

    if (
        not isinstance(cached_data, dict)
        or "solutions" not in cached_data
        or cached_data.get("version") != CACHE_VERSION
    ):
        logger.warning(f"   ⚠️ Cache format invalid ({fingerprint}); discarding")
        cache_path.unlink(missing_ok=True)
        return None

    solutions = tuple(cached_data["solutions"])
    logger.info(f"   ✅ Cache HIT: {fingerprint}")
    logger.info(f"      Created: {cached_data.get('timestamp', 'unknown')}")
    logger.info(f"      Solutions: {len(solutions):,}")
    return solutions, cached_data.get("metadata", {})


def save_to_cache(
    cache_dir: Path,
    fingerprint: str,
    solutions: Tuple[Solution, ...],
    metadata: Optional[Dict[str, Any]] = None,
    lock_timeout_s: float = 30.0,
) -> bool:
    """
    Save solutions to cache.

    Args:
        cache_dir: Cache directory path
        fingerprint: Cache key fingerprint
        solutions: Solutions of a complete (non-cancelled) run
        metadata: Optional metadata (config snapshot, timings)
        lock_timeout_s: Seconds to wait for the entry lock

    Returns:
        True if save succeeded, False otherwise
    """
    cached_data = {
        "fingerprint": fingerprint,
        "timestamp": datetime.now().isoformat(),
        "solutions": list(solutions),
        "metadata": metadata or {},
        "version": CACHE_VERSION,
    }

    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
        cache_path = get_cache_path(cache_dir, fingerprint)
        with _get_lock(cache_dir, fingerprint, lock_timeout_s):
            tmp_path = cache_path.with_suffix(".tmp")
            with open(tmp_path, "wb") as f:
                pickle.dump(cached_data, f, protocol=pickle.HIGHEST_PROTOCOL)
            tmp_path.replace(cache_path)
    except (OSError, pickle.PicklingError, filelock.Timeout) as e:
        logger.warning(f"   ⚠️ Failed to save cache: {e}")
        return False

    size_mb = cache_path.stat().st_size / (1024 * 1024)
    logger.info(f"   💾 Cache saved: {fingerprint} ({size_mb:.2f} MB)")
    _update_manifest(cache_dir, fingerprint, len(solutions))
    return True


def _update_manifest(cache_dir: Path, fingerprint: str, solution_count: int) -> None:
    """
    Update JSON manifest with new cache entry.

    The manifest is a human-readable registry of cache entries. It is
    optional; failures are logged at debug level only.
    """
    manifest_path = cache_dir / MANIFEST_NAME
    try:
        if manifest_path.exists():
            with open(manifest_path, "r", encoding="utf-8") as f:
                manifest = json.load(f)
        else:
            manifest = {"entries": [], "version": CACHE_VERSION}

        manifest["entries"] = [
            e for e in manifest.get("entries", []) if e.get("fingerprint") != fingerprint
        ]
        manifest["entries"].append(
            {
                "fingerprint": fingerprint,
                "created": datetime.now().isoformat(),
                "solutions": solution_count,
            }
        )

        with open(manifest_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=2)
    except (OSError, ValueError) as e:
        logger.debug(f"Manifest update skipped: {e}")


# ═══════════════════════════════════════════════════════════════════════════
# 🧹 CACHE MANAGEMENT
# ═══════════════════════════════════════════════════════════════════════════


def prune_old_cache(cache_dir: Path, max_entries: int = 20) -> int:
    """
    Remove old cache entries to prevent unbounded growth.

    Keeps the most recent max_entries files and removes older ones.

    Returns:
        Number of entries pruned
    """
    if not cache_dir.exists():
        return 0

    cache_files = sorted(
        cache_dir.glob(f"{CACHE_PREFIX}*.pkl"), key=lambda p: p.stat().st_mtime
    )
    if len(cache_files) <= max_entries:
        return 0

    pruned = 0
    for cache_file in cache_files[: len(cache_files) - max_entries]:
        try:
            cache_file.unlink()
            pruned += 1
        except OSError as e:
            logger.debug(f"Could not prune {cache_file.name}: {e}")

    if pruned:
        logger.info(f"   🧹 Pruned {pruned} old cache entries")
    return pruned


def invalidate_cache(cache_dir: Path, fingerprint: Optional[str] = None) -> int:
    """
    Invalidate (delete) cache entries.

    Args:
        cache_dir: Cache directory path
        fingerprint: Specific fingerprint to invalidate, or None for all

    Returns:
        Number of entries invalidated
    """
    if not cache_dir.exists():
        return 0

    if fingerprint:
        targets = [get_cache_path(cache_dir, fingerprint)]
    else:
        targets = list(cache_dir.glob(f"{CACHE_PREFIX}*.pkl"))

    invalidated = 0
    for cache_file in targets:
        if cache_file.exists():
            cache_file.unlink()
            invalidated += 1

    if invalidated:
        logger.info(f"   🗑️ Invalidated {invalidated} cache entries")
    return invalidated


def get_cache_stats(cache_dir: Path) -> Dict[str, Any]:
    """
    Get cache statistics for reporting.

    Returns:
        Dict with exists, entries, total_size_mb and cache_dir.
    """
    if not cache_dir.exists():
        return {
            "exists": False,
            "entries": 0,
            "total_size_mb": 0.0,
            "cache_dir": str(cache_dir),
        }

    cache_files = list(cache_dir.glob(f"{CACHE_PREFIX}*.pkl"))
    total_size = sum(f.stat().st_size for f in cache_files)
    return {
        "exists": True,
        "entries": len(cache_files),
        "total_size_mb": round(total_size / (1024 * 1024), 2),
        "cache_dir": str(cache_dir),
    }


# ═══════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════

__all__ = [
    "compute_cache_fingerprint",
    "load_from_cache",
    "save_to_cache",
    "prune_old_cache",
    "invalidate_cache",
    "get_cache_stats",
    "get_cache_path",
]
