"""
memocache - Keys

Canonical key construction and backend adaptation:
- builder.py: multi-part keys joined by a separator
- callsite.py: keys derived from a callable's identity and arguments
- rendering.py: deterministic rendering of values
- sanitizer.py: strategies adapting keys to backend constraints
"""

from .builder import DEFAULT_SEPARATOR, KeyBuilder
from .callsite import CallSite, KeyDerivationPolicy, derive_key, render_constructor_args
from .rendering import render_part, render_value
from .sanitizer import (
    HASH_ALGORITHMS,
    MEMCACHED_KEY_CONSTRAINTS,
    HashingSanitizer,
    IdentitySanitizer,
    KeyConstraints,
    KeySanitizer,
    ReplaceAndTruncateSanitizer,
    is_printable_ascii,
)

__all__ = [
    # Builder
    "DEFAULT_SEPARATOR",
    "KeyBuilder",
    # Call-site derivation
    "CallSite",
    "KeyDerivationPolicy",
    "derive_key",
    "render_constructor_args",
    # Rendering
    "render_part",
    "render_value",
    # Sanitizers
    "HASH_ALGORITHMS",
    "MEMCACHED_KEY_CONSTRAINTS",
    "HashingSanitizer",
    "IdentitySanitizer",
    "KeyConstraints",
    "KeySanitizer",
    "ReplaceAndTruncateSanitizer",
    "is_printable_ascii",
]
