"""Configuration defaults and presets.

Configuration is a plain dict. Functions that accept ``config`` take a
partial dict and overlay it on DEFAULT_CONFIG via resolve_config().
"""

from __future__ import annotations

import logging
from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    # Skip target nodes already assigned to an earlier pattern position
    'injective_matching': False,
    # Check match preconditions before rewriting
    'validate_matches': True,
    # Reject matches where a target element would be both deleted and kept
    'check_identification': False,
    # Run partitioned embedding search on a thread pool
    'parallel_execution': False,
    'max_parallel_workers': 4,
}

PRESET_MINIMAL: dict[str, Any] = {
    **DEFAULT_CONFIG,
    'validate_matches': False,
}

PRESET_STANDARD: dict[str, Any] = dict(DEFAULT_CONFIG)

PRESET_STRICT: dict[str, Any] = {
    **DEFAULT_CONFIG,
    'injective_matching': True,
    'validate_matches': True,
    'check_identification': True,
}


def resolve_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Overlay ``config`` on DEFAULT_CONFIG; unknown keys are kept but logged."""
    resolved = dict(DEFAULT_CONFIG)
    if not config:
        return resolved
    unknown = sorted(k for k in config if k not in DEFAULT_CONFIG)
    if unknown:
        logging.warning(f"Unknown config keys ignored: {unknown}")
    resolved.update(config)
    return resolved


__all__ = [
    'DEFAULT_CONFIG',
    'PRESET_MINIMAL',
    'PRESET_STANDARD',
    'PRESET_STRICT',
    'resolve_config',
]
