#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main`).
This module is a thin, import-safe leaf — it never imports from
other project packages.
"""

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL: str = "INFO"
LOG_FILE: str = "stopsign.log"
CONTROL_DEBUG_LOG_FILE: str = "control_debug.log"

# ── Persistence ──────────────────────────────────────────────────────────────
DEFAULT_SAVE_PATH: str = "stop_signs.json"

# ── Editor API ───────────────────────────────────────────────────────────────
API_HOST: str = "127.0.0.1"
API_PORT: int = 8000

# ── Environment variable names ───────────────────────────────────────────────
ENV_LOG_LEVEL: str = "STOPSIGN_LOG_LEVEL"
ENV_SAVE_PATH: str = "STOPSIGN_SAVE_PATH"
ENV_API_HOST: str = "STOPSIGN_API_HOST"
ENV_API_PORT: str = "STOPSIGN_API_PORT"
