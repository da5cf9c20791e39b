"""
Unit tests for error hierarchy.

Tests cover:
- Base ImagenError behavior
- Generation errors with provider context
- Cassette and replay errors
- Configuration errors
- Error serialization
"""

import pytest

from imagen.errors import (
    ERROR_CASSETTE_CORRUPT,
    ERROR_GENERATION_FAILED,
    ERROR_MISSING_API_KEY,
    ERROR_PROVIDER_API,
    ERROR_PROVIDER_NETWORK,
    ERROR_RECORDING_PERSIST,
    ERROR_REPLAY_EXHAUSTED,
    CassetteCorruptError,
    CassetteError,
    CassetteExhaustedError,
    CassetteReadError,
    CassetteWriteError,
    ConfigurationError,
    GenerationError,
    ImagenError,
    InvalidArgumentError,
    MissingApiKeyError,
    ProviderApiError,
    ProviderNetworkError,
    RecordingPersistError,
    ReplayError,
    UnknownCapabilityError,
)


class TestImagenError:
    """Tests for base ImagenError."""

    def test_basic_error(self) -> None:
        """Create a basic error with message."""
        err = ImagenError(message="Something went wrong", code=9999)
        assert err.message == "Something went wrong"
        assert err.code == 9999
        assert err.suggestion is None
        assert err.context == {}

    def test_str_format(self) -> None:
        """String format includes code and message."""
        err = ImagenError(message="Test error", code=1234)
        assert str(err) == "[E1234] Test error"

    def test_str_with_suggestion(self) -> None:
        """Suggestion is appended on its own line."""
        err = ImagenError(message="Failed", code=1, suggestion="Try again")
        assert str(err) == "[E1] Failed\nSuggestion: Try again"

    def test_repr_format(self) -> None:
        """Repr includes class name and details."""
        err = ImagenError(message="Test", code=1)
        assert repr(err).startswith("ImagenError(message='Test'")

    def test_to_dict(self) -> None:
        """Serialization includes type, code and context."""
        err = ProviderApiError(message="boom", provider="gemini", model="m", status=500)
        data = err.to_dict()
        assert data["error_type"] == "ProviderApiError"
        assert data["code"] == ERROR_PROVIDER_API
        assert data["context"]["status"] == 500
        assert data["context"]["provider"] == "gemini"

    def test_can_be_raised(self) -> None:
        with pytest.raises(ImagenError):
            raise ConfigurationError(message="bad")


class TestGenerationErrors:
    """Tests for provider failure errors."""

    def test_generation_error_defaults(self) -> None:
        err = GenerationError(model="gpt-image-1")
        assert err.code == ERROR_GENERATION_FAILED
        assert "gpt-image-1" in err.message

    def test_provider_api_error(self) -> None:
        err = ProviderApiError(provider="openai", model="gpt-image-1", status=429)
        assert isinstance(err, GenerationError)
        assert err.code == ERROR_PROVIDER_API
        assert err.message == "API error (429)"

    def test_provider_network_error(self) -> None:
        err = ProviderNetworkError(provider="gemini", model="m", underlying_error="timed out")
        assert err.code == ERROR_PROVIDER_NETWORK
        assert "timed out" in err.message
        assert err.suggestion is not None
        assert err.context["underlying_error"] == "timed out"

    def test_equal_errors_compare_equal(self) -> None:
        """Errors with the same fields are equal, which replay relies on."""
        a = ProviderApiError(message="API error (500): x", provider="gemini", model="m", status=500)
        b = ProviderApiError(message="API error (500): x", provider="gemini", model="m", status=500)
        assert a == b


class TestCassetteErrors:
    """Tests for cassette storage errors."""

    def test_hierarchy(self) -> None:
        assert issubclass(CassetteWriteError, CassetteError)
        assert issubclass(CassetteReadError, CassetteError)
        assert issubclass(CassetteCorruptError, CassetteError)
        assert issubclass(RecordingPersistError, CassetteWriteError)

    def test_corrupt_lists_problems(self) -> None:
        err = CassetteCorruptError(path="x.yaml", problems=["duplicate sequence 1", "bad"])
        assert err.code == ERROR_CASSETTE_CORRUPT
        assert err.message == "Corrupt cassette x.yaml: duplicate sequence 1; bad"
        assert "IMAGEN_REC=1" in err.suggestion

    def test_read_error_mentions_replay(self) -> None:
        err = CassetteReadError(path="missing.yaml", underlying_error="No such file")
        assert "missing.yaml" in err.message
        assert "IMAGEN_REPLAY" in err.suggestion

    def test_persist_error_keeps_response(self) -> None:
        err = RecordingPersistError(path="c.yaml", underlying_error="disk full", response="resp")
        assert err.code == ERROR_RECORDING_PERSIST
        assert err.response == "resp"
        assert err.generation_error is None
        assert err.context["generated"] is True

    def test_persist_error_keeps_failure(self) -> None:
        failure = GenerationError(message="nope", provider="openai", model="m")
        err = RecordingPersistError(path="c.yaml", underlying_error="disk full", generation_error=failure)
        assert err.generation_error is failure
        assert err.context["generated"] is False


class TestReplayErrors:
    """Tests for replay errors."""

    def test_exhausted_message(self) -> None:
        err = CassetteExhaustedError(capability="image_generator", method="generate", recorded=2)
        assert isinstance(err, ReplayError)
        assert err.code == ERROR_REPLAY_EXHAUSTED
        assert err.message == (
            "Cassette exhausted: all 2 interactions for image_generator::generate have been consumed"
        )

    def test_unknown_capability_lists_available(self) -> None:
        err = UnknownCapabilityError(
            capability="video", method="render", available=["image_generator::generate"]
        )
        assert isinstance(err, ConfigurationError)
        assert "video::render" in err.message
        assert "image_generator::generate" in err.message


class TestConfigurationErrors:
    """Tests for configuration errors."""

    def test_missing_api_key(self) -> None:
        err = MissingApiKeyError(provider="Gemini", env_var="GEMINI_API_KEY")
        assert err.code == ERROR_MISSING_API_KEY
        assert err.message == "No API key for Gemini"
        assert err.suggestion == "Set GEMINI_API_KEY or add it to the config file"

    def test_invalid_argument_default_message(self) -> None:
        err = InvalidArgumentError(argument="size", value="8K")
        assert err.message == "Invalid size: '8K'"
        assert err.context == {"argument": "size", "value": "8K"}
