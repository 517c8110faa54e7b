"""
memocache - Error Type Tests
"""

from memocache.errors import (
    BackendUnavailableError,
    CacheError,
    ConfigurationError,
    ErrorCode,
    KeyRenderingError,
    MemocacheError,
    SanitizationViolationError,
    StaticTypeOmissionError,
    extract_error_code,
    is_retryable_error,
)


class TestErrorHierarchy:
    def test_cache_errors_share_a_base(self) -> None:
        for error_type in (BackendUnavailableError, KeyRenderingError, SanitizationViolationError):
            assert issubclass(error_type, CacheError)
            assert issubclass(error_type, MemocacheError)

        assert issubclass(StaticTypeOmissionError, MemocacheError)
        assert issubclass(ConfigurationError, MemocacheError)

    def test_backend_unavailable(self) -> None:
        error = BackendUnavailableError("redis", "get", "timeout", details={"key": "k"})

        assert str(error) == "Cache backend 'redis' failed during get: timeout"
        assert error.details == {"key": "k", "backend": "redis", "operation": "get"}
        assert error.to_dict() == {
            "error": "BackendUnavailableError",
            "error_code": "BACKEND_UNAVAILABLE",
            "message": "Cache backend 'redis' failed during get: timeout",
            "details": {"key": "k", "backend": "redis", "operation": "get"},
        }

    def test_key_rendering_error_names_the_type(self) -> None:
        error = KeyRenderingError(object(), "no rendering")

        assert error.value_type == "object"
        assert "object" in error.message

    def test_static_type_omission(self) -> None:
        error = StaticTypeOmissionError("app.fetch")

        assert error.qualified_name == "app.fetch"
        assert error.details["reason"] == "missing return annotation"


class TestClassification:
    def test_retryable(self) -> None:
        assert is_retryable_error(BackendUnavailableError("redis", "get", "timeout"))
        assert is_retryable_error(ConnectionError())
        assert is_retryable_error(TimeoutError())

    def test_not_retryable(self) -> None:
        assert not is_retryable_error(BackendUnavailableError("redis", "put", "bad value", retryable=False))
        assert not is_retryable_error(KeyRenderingError(object(), "no rendering"))
        assert not is_retryable_error(ValueError())

    def test_extract_error_code(self) -> None:
        assert extract_error_code(SanitizationViolationError("bad")) == ErrorCode.SANITIZATION_VIOLATION
        assert extract_error_code(RuntimeError()) == ErrorCode.INTERNAL_ERROR
