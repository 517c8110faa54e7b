"""
memocache - Configuration Module

Provides typed settings loading and validation.
"""

from .loader import get_settings, load_settings, reload_settings
from .schemas import (
    BackendSettings,
    CacheBackend,
    ExecutionSettings,
    FlagSettings,
    KeySettings,
    LogLevel,
    MemocacheSettings,
    SanitizerKind,
    SanitizerSettings,
)

__all__ = [
    # Loader functions
    "load_settings",
    "get_settings",
    "reload_settings",
    # Root settings
    "MemocacheSettings",
    # Enums
    "CacheBackend",
    "SanitizerKind",
    "LogLevel",
    # Sections
    "BackendSettings",
    "SanitizerSettings",
    "KeySettings",
    "FlagSettings",
    "ExecutionSettings",
]
