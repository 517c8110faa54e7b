"""
memocache - Cache Backends Module

Pluggable cache backends behind one interface:
- interface.py: Abstract backend contract all backends must implement
- backends/: Backend implementations (memory, redis, sqlite, retrying adapter)
- factory.py: Builds backends and configurations from settings
- serialization.py: JSON codec for out-of-process backends

The factory is imported from memocache.cache.factory (or the memocache
package root); it is not re-exported here because it depends on the
configuration layer built on top of this module.
"""

from .interface import MISSING, CacheInterface, ttl_seconds

__all__ = [
    "CacheInterface",
    "MISSING",
    "ttl_seconds",
]
