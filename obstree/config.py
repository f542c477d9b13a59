"""
Observable Configuration - Process-Wide Defaults for New Trees
==============================================================

Every ObservableTree snapshots the active configuration when it is created, so
changing the configuration afterwards only affects trees created later.

Options:
    delimiter: character joining path segments into canonical path strings.
        Must never occur inside a user key; defaults to U+FEFF.
    root_key: canonical path of the root node.
    path_cache_size: number of split paths each tree keeps in its LRU cache.
    max_notify_depth: optional bound on nested (listener-triggered)
        notification cycles. None means unbounded.
    date_modified_key: reserved key for timestamped persistence payloads.
    save_timeout: default debounce, in seconds, for persistence saves.

Usage:
    configure_observable(max_notify_depth=64)
    tree = observable({"todos": []})
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Optional


@dataclass(frozen=True)
class ObservableConfiguration:
    """Immutable set of options read by trees and collaborators."""

    delimiter: str = "\uFEFF"
    root_key: str = "_"
    path_cache_size: int = 1024
    max_notify_depth: Optional[int] = None
    date_modified_key: str = "@"
    save_timeout: Optional[float] = None


_configuration: Optional[ObservableConfiguration] = None


def get_configuration() -> ObservableConfiguration:
    """Return the active configuration, creating the defaults lazily."""
    global _configuration
    if _configuration is None:
        _configuration = ObservableConfiguration()
    return _configuration


def configure_observable(**overrides: Any) -> ObservableConfiguration:
    """
    Replace the active configuration with one carrying the given overrides.

    Raises:
        TypeError: If an option name is unknown.
        ValueError: If an option value is unusable.
    """
    global _configuration
    known = {f.name for f in fields(ObservableConfiguration)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise TypeError(f"Unknown configuration option(s): {', '.join(unknown)}")

    candidate = replace(get_configuration(), **overrides)
    _validate(candidate)
    _configuration = candidate
    return candidate


def _validate(config: ObservableConfiguration) -> None:
    if not config.delimiter:
        raise ValueError("delimiter must be a non-empty string")
    if not config.root_key or config.delimiter in config.root_key:
        raise ValueError("root_key must be non-empty and must not contain the delimiter")
    if config.path_cache_size < 1:
        raise ValueError("path_cache_size must be at least 1")
    if config.max_notify_depth is not None and config.max_notify_depth < 1:
        raise ValueError("max_notify_depth must be None or at least 1")
    if config.save_timeout is not None and config.save_timeout < 0:
        raise ValueError("save_timeout must be None or non-negative")


def _reset_configuration() -> None:
    """Restore the defaults. Intended for test isolation."""
    global _configuration
    _configuration = None
