"""
Tunable thresholds and runtime settings for PageDoc.

Analyzer thresholds are plain constants. Runtime settings come from the
environment (PAGEDOC_*) and fall back to defaults on missing or invalid values.
"""

import os
from dataclasses import dataclass

# ── Issue triggers ────────────────────────────────────────────────────────────
SLOW_TTFB_MS = 600
HEAVY_JS_BLOCKING_MS = 500
LARGE_IMAGE_BYTES = 500 * 1024
BLOCKING_STYLESHEET_MS = 100
LARGE_DOM_NODES = 1500

# ── Score deductions ──────────────────────────────────────────────────────────
# Lower than HEAVY_JS_BLOCKING_MS: blocking time costs score before it raises an issue.
SCORE_BLOCKING_MS = 300
SLOW_LOAD_MS = 3000

TTFB_PENALTY = 15
BLOCKING_PENALTY = 20
SLOW_LOAD_PENALTY = 15
PER_ISSUE_PENALTY = 5

# ── Display ───────────────────────────────────────────────────────────────────
IMAGE_NAME_TAIL = 20
STYLESHEET_NAME_TAIL = 15


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    headful: bool = False
    nav_timeout_ms: int = 30000
    settle_ms: int = 1500
    collect_timeout_s: int = 10
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            headful=_env_bool("PAGEDOC_HEADFUL"),
            nav_timeout_ms=_env_int("PAGEDOC_NAV_TIMEOUT_MS", 30000),
            settle_ms=_env_int("PAGEDOC_SETTLE_MS", 1500),
            collect_timeout_s=_env_int("PAGEDOC_COLLECT_TIMEOUT_S", 10),
            log_level=os.environ.get("PAGEDOC_LOG_LEVEL", "INFO").upper(),
            log_file=os.environ.get("PAGEDOC_LOG_FILE") or None,
        )
