"""Configuration helpers for squad rules and runtime settings."""

from .environment import base_url, env_float, env_int, env_str, history_dir, http_retries, http_timeout
from .rules import FPL_RULES, SquadRules, get_rules, iter_rules

__all__ = [
    "FPL_RULES",
    "SquadRules",
    "base_url",
    "env_float",
    "env_int",
    "env_str",
    "get_rules",
    "history_dir",
    "http_retries",
    "http_timeout",
    "iter_rules",
]
