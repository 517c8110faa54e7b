"""
memocache - Cache Configuration

Immutable record binding a backend to the policies every caching operation
follows. Created once by the application and shared by all callers; it is
never mutated after construction.
"""

from dataclasses import dataclass, field

from .cache.interface import CacheInterface
from .execution import DEFAULT_EXECUTION, ExecutionPolicy
from .flags import DEFAULT_FLAGS, Flags
from .keys.builder import DEFAULT_SEPARATOR, KeyBuilder
from .keys.callsite import KeyDerivationPolicy
from .keys.sanitizer import IdentitySanitizer, KeySanitizer


@dataclass(frozen=True)
class CacheConfiguration:
    """
    Attributes:
        backend: Store all operations are delegated to
        execution: Where synchronous computations run
        key_policy: Call-site identity elements included in memoization keys
        default_flags: Flags used when none are given or scoped
        key_separator: Separator between multi-part key parts
        key_prefix: Optional prefix for multi-part keys
        sanitizer: Adapts canonical keys to the backend's key constraints
    """

    backend: CacheInterface
    execution: ExecutionPolicy = DEFAULT_EXECUTION
    key_policy: KeyDerivationPolicy = KeyDerivationPolicy.IDENTITY
    default_flags: Flags = DEFAULT_FLAGS
    key_separator: str = DEFAULT_SEPARATOR
    key_prefix: str | None = None
    sanitizer: KeySanitizer = field(default_factory=IdentitySanitizer)

    @property
    def key_builder(self) -> KeyBuilder:
        return KeyBuilder(separator=self.key_separator, prefix=self.key_prefix)
