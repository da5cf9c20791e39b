"""
Exception hierarchy for Imagen.

All Imagen exceptions inherit from ImagenError, allowing callers to catch
all Imagen-specific exceptions with a single except clause.

Exception Categories:
    - GenerationError: A provider failed to generate images
    - CassetteError: A cassette could not be written, read or parsed
    - ReplayError: A replayed cassette ran out of interactions
    - ConfigurationError: Invalid configuration, keys or arguments

Generation errors are the only ones that get recorded into cassettes and
replayed back. Every other error describes a problem with Imagen itself.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Generation errors: 1xxx
ERROR_GENERATION_FAILED = 1000
ERROR_PROVIDER_API = 1001
ERROR_PROVIDER_NETWORK = 1002

# Cassette storage errors: 2xxx
ERROR_CASSETTE_WRITE = 2001
ERROR_CASSETTE_READ = 2002
ERROR_CASSETTE_CORRUPT = 2003
ERROR_RECORDING_PERSIST = 2004

# Replay errors: 3xxx
ERROR_REPLAY_EXHAUSTED = 3001

# Configuration errors: 4xxx
ERROR_CONFIGURATION = 4001
ERROR_UNKNOWN_CAPABILITY = 4002
ERROR_CONFIG_FILE = 4003
ERROR_MISSING_API_KEY = 4004
ERROR_INVALID_ARGUMENT = 4005


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class ImagenError(Exception):
    """
    Base exception for all Imagen errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Generation Errors
# =============================================================================


@dataclass
class GenerationError(ImagenError):
    """
    Raised when a provider fails to generate images.

    This is the failure half of the generation contract. Recording
    wrappers capture it verbatim and replaying generators raise it again.

    Attributes:
        provider: Provider that failed (e.g., "gemini", "openai")
        model: Model identifier that was requested
    """

    provider: str = ""
    model: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Image generation failed for {self.model or 'unknown model'}"
        if self.code == 0:
            self.code = ERROR_GENERATION_FAILED
        self.context.update({
            "provider": self.provider,
            "model": self.model,
        })


@dataclass
class ProviderApiError(GenerationError):
    """Raised when a provider API answers with an error or an unusable body."""

    status: int = 0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"API error ({self.status})"
        if self.code == 0:
            self.code = ERROR_PROVIDER_API
        super().__post_init__()
        self.context["status"] = self.status


@dataclass
class ProviderNetworkError(GenerationError):
    """Raised when a provider cannot be reached."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Network error: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_PROVIDER_NETWORK
        if not self.suggestion:
            self.suggestion = "Check your network connection and try again"
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


# =============================================================================
# Cassette Errors
# =============================================================================


@dataclass
class CassetteError(ImagenError):
    """
    Base class for cassette storage errors.

    Attributes:
        path: Cassette file involved in the failure
    """

    path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["path"] = self.path


@dataclass
class CassetteWriteError(CassetteError):
    """Raised when a cassette cannot be written to disk."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to write cassette {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CASSETTE_WRITE
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class CassetteReadError(CassetteError):
    """Raised when a cassette file cannot be read."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to read cassette {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CASSETTE_READ
        if not self.suggestion:
            self.suggestion = "Check that IMAGEN_REPLAY points to an existing cassette file"
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class CassetteCorruptError(CassetteError):
    """Raised when a cassette parses but fails validation."""

    problems: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            detail = "; ".join(self.problems) if self.problems else "invalid content"
            self.message = f"Corrupt cassette {self.path}: {detail}"
        if self.code == 0:
            self.code = ERROR_CASSETTE_CORRUPT
        if not self.suggestion:
            self.suggestion = "Re-record the cassette with IMAGEN_REC=1"
        super().__post_init__()
        self.context["problems"] = self.problems


@dataclass
class RecordingPersistError(CassetteWriteError):
    """
    Raised when an interaction was generated but could not be saved.

    The delegate's own outcome is preserved: exactly one of ``response``
    and ``generation_error`` is set.

    Attributes:
        response: The ImageResponse the delegate returned, if it succeeded
        generation_error: The GenerationError the delegate raised, if it failed
    """

    response: Any = None
    generation_error: GenerationError | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            outcome = "failure" if self.generation_error is not None else "images"
            self.message = (
                f"Generated {outcome} could not be saved to cassette {self.path}: "
                f"{self.underlying_error}"
            )
        if self.code == 0:
            self.code = ERROR_RECORDING_PERSIST
        super().__post_init__()
        self.context["generated"] = self.generation_error is None


# =============================================================================
# Replay Errors
# =============================================================================


@dataclass
class ReplayError(ImagenError):
    """
    Base class for replay errors.

    Attributes:
        capability: Capability being replayed (e.g., "image_generator")
        method: Method being replayed (e.g., "generate")
    """

    capability: str = ""
    method: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "capability": self.capability,
            "method": self.method,
        })


@dataclass
class CassetteExhaustedError(ReplayError):
    """Raised when more calls are made than the cassette recorded."""

    recorded: int = 0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"Cassette exhausted: all {self.recorded} interactions for "
                f"{self.capability}::{self.method} have been consumed"
            )
        if self.code == 0:
            self.code = ERROR_REPLAY_EXHAUSTED
        if not self.suggestion:
            self.suggestion = "Re-record the cassette so it covers every call"
        super().__post_init__()
        self.context["recorded"] = self.recorded


# =============================================================================
# Configuration Errors
# =============================================================================


@dataclass
class ConfigurationError(ImagenError):
    """Raised when Imagen is configured inconsistently."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Invalid configuration"
        if self.code == 0:
            self.code = ERROR_CONFIGURATION


@dataclass
class UnknownCapabilityError(ConfigurationError):
    """Raised when a cassette has no interactions for the requested capability."""

    capability: str = ""
    method: str = ""
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"No interactions recorded for {self.capability}::{self.method}. "
                f"Available: [{', '.join(self.available)}]"
            )
        if self.code == 0:
            self.code = ERROR_UNKNOWN_CAPABILITY
        super().__post_init__()
        self.context.update({
            "capability": self.capability,
            "method": self.method,
            "available": self.available,
        })


@dataclass
class ConfigFileError(ConfigurationError):
    """Raised when the config file exists but cannot be loaded."""

    path: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to load config {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CONFIG_FILE
        super().__post_init__()
        self.context.update({
            "path": self.path,
            "underlying_error": self.underlying_error,
        })


@dataclass
class MissingApiKeyError(ConfigurationError):
    """Raised when no API key is configured for the selected provider."""

    provider: str = ""
    env_var: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"No API key for {self.provider}"
        if self.code == 0:
            self.code = ERROR_MISSING_API_KEY
        if not self.suggestion:
            self.suggestion = f"Set {self.env_var} or add it to the config file"
        super().__post_init__()
        self.context.update({
            "provider": self.provider,
            "env_var": self.env_var,
        })


@dataclass
class InvalidArgumentError(ConfigurationError):
    """Raised when a command-line argument is not valid."""

    argument: str = ""
    value: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid {self.argument}: {self.value!r}"
        if self.code == 0:
            self.code = ERROR_INVALID_ARGUMENT
        super().__post_init__()
        self.context.update({
            "argument": self.argument,
            "value": self.value,
        })
