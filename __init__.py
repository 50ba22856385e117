"""
Amp Gain Search

Exhaustive search for two-stage gain-switchable amplifier configurations.
Each stage switches between two gains; the search finds every pair of stage
ranges whose four composite gains map the input interval onto the output
interval through four contiguous zones.
"""

from Amp_Gain_Search.config import CONFIG
from Amp_Gain_Search.config_types import AppConfig, SearchConfig
from Amp_Gain_Search.parallel.search_orchestrator import GainSearchEngine, run_gain_search
from Amp_Gain_Search.main import run_amp_search

__all__ = [
    "CONFIG",
    "AppConfig",
    "SearchConfig",
    "GainSearchEngine",
    "run_gain_search",
    "run_amp_search",
]
