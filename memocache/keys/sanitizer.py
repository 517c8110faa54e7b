"""
memocache - Key Sanitizers

Adapt canonical keys to a backend's key constraints (character set and
maximum length). Sanitizers are pure, stateless strategies chosen once per
configuration:

- ReplaceAndTruncateSanitizer: keeps keys readable; long keys sharing a prefix
  may collide after truncation (accepted tradeoff)
- HashingSanitizer: fixed-length hex digest; not readable, but collisions are
  cryptographically unlikely
- IdentitySanitizer: for backends without key constraints
"""

import hashlib
import string
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import ConfigurationError, SanitizationViolationError

HASH_ALGORITHMS = ("md5", "sha1", "sha256", "sha512")


def is_printable_ascii(char: str) -> bool:
    """Printable ASCII without space (``!`` through ``~``), the memcached key charset."""
    return "!" <= char <= "~"


@dataclass(frozen=True)
class KeyConstraints:
    """Key constraints of a backend."""

    max_key_length: int
    allowed_char: Callable[[str], bool] = is_printable_ascii

    def __post_init__(self) -> None:
        if self.max_key_length < 1:
            raise ConfigurationError(
                "max_key_length must be positive",
                details={"max_key_length": self.max_key_length},
            )

    def violation(self, key: str) -> str | None:
        """Describe how a key breaks these constraints, or None if it satisfies them."""
        if len(key) > self.max_key_length:
            return f"length {len(key)} exceeds {self.max_key_length}"
        for index, char in enumerate(key):
            if not self.allowed_char(char):
                return f"character {char!r} at index {index} is not allowed"
        return None


MEMCACHED_KEY_CONSTRAINTS = KeyConstraints(max_key_length=250, allowed_char=is_printable_ascii)


class KeySanitizer(ABC):
    """Base class for key sanitizers."""

    constraints: KeyConstraints | None = None

    def __call__(self, key: str) -> str:
        return self.sanitize(key)

    def sanitize(self, key: str) -> str:
        """
        Sanitize a canonical key and verify the result.

        Raises:
            SanitizationViolationError: If the result still breaks the constraints
        """
        sanitized = self._sanitize(key)
        if self.constraints is not None:
            problem = self.constraints.violation(sanitized)
            if problem is not None:
                raise SanitizationViolationError(
                    f"{type(self).__name__} produced an invalid key: {problem}",
                    details={"key_preview": sanitized[:100], "sanitizer": type(self).__name__},
                )
        return sanitized

    @abstractmethod
    def _sanitize(self, key: str) -> str:
        """Strategy-specific transformation."""


class IdentitySanitizer(KeySanitizer):
    """Leaves keys unchanged."""

    def _sanitize(self, key: str) -> str:
        return key


class ReplaceAndTruncateSanitizer(KeySanitizer):
    """Replace disallowed characters with a placeholder, then truncate."""

    def __init__(self, constraints: KeyConstraints = MEMCACHED_KEY_CONSTRAINTS, replacement: str = "_"):
        if len(replacement) != 1 or not constraints.allowed_char(replacement):
            raise ConfigurationError(
                "replacement must be a single allowed character",
                details={"replacement": replacement},
            )
        self.constraints = constraints
        self.replacement = replacement

    def _sanitize(self, key: str) -> str:
        allowed = self.constraints.allowed_char
        cleaned = "".join(char if allowed(char) else self.replacement for char in key)
        return cleaned[: self.constraints.max_key_length]

    def __repr__(self) -> str:
        return f"ReplaceAndTruncateSanitizer(max_key_length={self.constraints.max_key_length}, replacement={self.replacement!r})"


class HashingSanitizer(KeySanitizer):
    """Replace the key with the hex digest of its UTF-8 encoding."""

    def __init__(self, constraints: KeyConstraints = MEMCACHED_KEY_CONSTRAINTS, algorithm: str = "sha256"):
        algorithm = algorithm.lower()
        if algorithm not in HASH_ALGORITHMS:
            raise ConfigurationError(
                f"Unsupported hash algorithm: {algorithm}",
                details={"algorithm": algorithm, "supported": list(HASH_ALGORITHMS)},
            )

        digest_length = hashlib.new(algorithm).digest_size * 2
        if digest_length > constraints.max_key_length:
            raise ConfigurationError(
                f"{algorithm} digests are {digest_length} characters, longer than the {constraints.max_key_length} allowed",
                details={"algorithm": algorithm, "max_key_length": constraints.max_key_length},
            )
        if not all(constraints.allowed_char(char) for char in string.hexdigits.lower()):
            raise ConfigurationError(
                "Hashing sanitizer requires hexadecimal characters to be allowed",
                details={"algorithm": algorithm},
            )

        self.constraints = constraints
        self.algorithm = algorithm

    def _sanitize(self, key: str) -> str:
        return hashlib.new(self.algorithm, key.encode("utf-8")).hexdigest()

    def __repr__(self) -> str:
        return f"HashingSanitizer(algorithm={self.algorithm!r})"
