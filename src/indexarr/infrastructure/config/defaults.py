"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "indexarr",
    "environment": "dev",
    "definitions": {
        "dir": "./definitions",
    },
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "user_agent": "Prowlarr/1.0 (Text-Mode-Operator)",
    },
    "relay": {
        "url": None,
        "max_timeout_ms": 60_000,
    },
    "search": {
        "max_concurrent": 5,
        "deadline_seconds": 60.0,
        "config_fallback": "guest",
    },
    "probe": {
        "concurrency": 5,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
