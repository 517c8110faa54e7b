"""
memocache - Backend Serialization Tests
"""

import pytest

from memocache.cache.serialization import decode_value, encode_value
from memocache.errors import BackendUnavailableError


class TestSerialization:
    def test_none_is_stored_as_null(self) -> None:
        assert encode_value(None, "sqlite") == b"null"
        assert decode_value(b"null", "sqlite") is None

    def test_unserializable_value(self) -> None:
        with pytest.raises(BackendUnavailableError) as exc_info:
            encode_value(object(), "sqlite")

        assert exc_info.value.retryable is False
        assert exc_info.value.details["value_type"] == "object"

    def test_corrupt_payload(self) -> None:
        with pytest.raises(BackendUnavailableError, match="not valid JSON"):
            decode_value(b"{not json", "redis")
