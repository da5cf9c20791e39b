"""
Schema definitions for Imagen.

This module defines the Pydantic models shared by every generator backend
and by the cassette format:
- GenerationRequest: What to generate
- GeneratedImage/ImageResponse: What a provider returned
- SuccessOutcome/FailureOutcome: The complete outcome of one call
- InteractionRecord/Cassette: Persisted traffic for record/replay

Design Decisions:
    - Value models are immutable (frozen=True)
    - Unknown fields are rejected (extra="forbid")
    - Image bytes are base64 text in the JSON view and raw bytes in Python
    - Cassettes written by earlier releases (seq/port/Ok/Err keys) still load
"""

import base64
import binascii
import dataclasses
from datetime import UTC, datetime
from typing import Annotated, Any, Literal, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from imagen.errors import GenerationError, ProviderApiError, ProviderNetworkError


# =============================================================================
# Request / Response Models
# =============================================================================


class GenerationRequest(BaseModel):
    """
    A request to generate images.

    Attributes:
        model: The resolved model identifier (e.g., "gemini-3.1-flash-image-preview")
        prompt: The text prompt describing the desired image
        aspect_ratio: Aspect ratio token (e.g., "1:1", "16:9")
        size: Image size token ("1K", "2K", "4K")
        quality: Quality token ("auto", "low", "medium", "high")
        format: Output format token ("jpeg", "png", "webp")
        count: Number of images to generate
        thinking: Thinking level for Gemini models, if any
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str = Field(..., description="Resolved model identifier", min_length=1)
    prompt: str = Field(..., description="Text prompt")
    aspect_ratio: str = Field(default="1:1", description="Aspect ratio token")
    size: str = Field(default="1K", description="Image size token")
    quality: str = Field(default="auto", description="Quality token")
    format: str = Field(default="jpeg", description="Output format token")
    count: int = Field(default=1, description="Number of images", ge=1)
    thinking: str | None = Field(default=None, description="Gemini thinking level")


class GeneratedImage(BaseModel):
    """
    A single generated image.

    Attributes:
        data: Raw image bytes
        mime_type: MIME type of the image (e.g., "image/jpeg")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    data: bytes = Field(..., description="Raw image bytes")
    mime_type: str = Field(..., description="MIME type of the image")

    @field_validator("data", mode="before")
    @classmethod
    def decode_base64(cls, v: Any) -> Any:
        """Accept base64 text (as stored in cassettes) as well as raw bytes."""
        if isinstance(v, str):
            try:
                return base64.b64decode(v, validate=True)
            except (binascii.Error, ValueError) as e:
                msg = f"Image data is not valid base64: {e}"
                raise ValueError(msg) from e
        return v

    @field_serializer("data", when_used="json")
    def encode_base64(self, v: bytes) -> str:
        """Serialize image bytes as standard base64 text."""
        return base64.b64encode(v).decode("ascii")

    def __repr__(self) -> str:
        return f"GeneratedImage(mime_type={self.mime_type!r}, size={len(self.data)})"


class ImageResponse(BaseModel):
    """Images returned by one successful generation call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    images: list[GeneratedImage] = Field(default_factory=list)


# =============================================================================
# Outcome Models
# =============================================================================

# Error classes that can be rebuilt from a FailureRecord
_FAILURE_KINDS: dict[str, type[GenerationError]] = {
    "GenerationError": GenerationError,
    "ProviderApiError": ProviderApiError,
    "ProviderNetworkError": ProviderNetworkError,
}

# Fields every GenerationError has; anything else on a subclass goes into `extra`
_BASE_FIELDS = frozenset({"message", "code", "suggestion", "context", "provider", "model"})
_TOP_LEVEL_FIELDS = frozenset({"status", "underlying_error"})

E = TypeVar("E", bound=type[GenerationError])


def register_failure_kind(error_cls: E) -> E:
    """
    Make a GenerationError subclass replayable as itself.

    Unregistered subclasses replay as their nearest registered base class.

    Example:
        @register_failure_kind
        @dataclass
        class QuotaError(ProviderApiError):
            retry_after: int = 0
    """
    _FAILURE_KINDS[error_cls.__name__] = error_cls
    return error_cls


def _is_plain(value: Any) -> bool:
    """True for values that survive a YAML round trip unchanged."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return True
    if isinstance(value, list):
        return all(_is_plain(v) for v in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and _is_plain(v) for k, v in value.items())
    return False


def _plain_items(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if _is_plain(v)}


class FailureRecord(BaseModel):
    """
    A persisted description of a generation failure.

    Attributes:
        kind: Name of the GenerationError subclass that was raised
        lineage: Names of the GenerationError classes in its MRO, nearest first
        message: Error message
        code: Imagen error code
        provider: Provider that failed
        model: Model that was requested
        status: HTTP status for API errors
        underlying_error: Transport error text for network errors
        suggestion: Hint attached to the error, if any
        context: The error's context dict
        extra: Other dataclass fields declared by the subclass
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: str = Field(default="GenerationError")
    lineage: list[str] = Field(default_factory=list)
    message: str = Field(default="")
    code: int = Field(default=0)
    provider: str = Field(default="")
    model: str = Field(default="")
    status: int | None = Field(default=None)
    underlying_error: str | None = Field(default=None)
    suggestion: str | None = Field(default=None)
    context: dict[str, Any] = Field(default_factory=dict)
    extra: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_error(cls, error: GenerationError) -> "FailureRecord":
        """Capture a GenerationError, keeping every plain-data field."""
        lineage = [
            klass.__name__
            for klass in type(error).__mro__
            if isinstance(klass, type) and issubclass(klass, GenerationError)
        ]
        extra = {
            f.name: getattr(error, f.name)
            for f in dataclasses.fields(error)
            if f.name not in _BASE_FIELDS | _TOP_LEVEL_FIELDS
        }
        return cls(
            kind=type(error).__name__,
            lineage=lineage,
            message=error.message,
            code=error.code,
            provider=error.provider,
            model=error.model,
            status=getattr(error, "status", None),
            underlying_error=getattr(error, "underlying_error", None),
            suggestion=error.suggestion,
            context=_plain_items(error.context),
            extra=_plain_items(extra),
        )

    def _error_class(self) -> type[GenerationError]:
        for name in (self.kind, *self.lineage):
            if name in _FAILURE_KINDS:
                return _FAILURE_KINDS[name]
        return GenerationError

    def to_error(self) -> GenerationError:
        """Rebuild the GenerationError this record was captured from."""
        error_cls = self._error_class()
        init_fields = {f.name for f in dataclasses.fields(error_cls) if f.init}
        kwargs: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "provider": self.provider,
            "model": self.model,
            "suggestion": self.suggestion,
        }
        if "status" in init_fields and self.status is not None:
            kwargs["status"] = self.status
        if "underlying_error" in init_fields and self.underlying_error is not None:
            kwargs["underlying_error"] = self.underlying_error
        kwargs.update({k: v for k, v in self.extra.items() if k in init_fields})

        error = error_cls(**kwargs)
        if self.context:
            # __post_init__ rebuilds the default keys; the recorded dict wins
            error.context = dict(self.context)
        return error


class SuccessOutcome(BaseModel):
    """A generation call that returned images."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: Literal["success"] = "success"
    images: list[GeneratedImage] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: ImageResponse) -> "SuccessOutcome":
        return cls(images=list(response.images))

    def replay(self) -> ImageResponse:
        """Return the recorded response."""
        return ImageResponse(images=list(self.images))


class FailureOutcome(BaseModel):
    """A generation call that raised a GenerationError."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: Literal["failure"] = "failure"
    error: FailureRecord

    @classmethod
    def from_error(cls, error: GenerationError) -> "FailureOutcome":
        return cls(error=FailureRecord.from_error(error))

    def replay(self) -> ImageResponse:
        """Raise the recorded failure."""
        raise self.error.to_error()


GenerationOutcome = Annotated[SuccessOutcome | FailureOutcome, Field(discriminator="status")]


# =============================================================================
# Cassette Models
# =============================================================================


class InteractionRecord(BaseModel):
    """
    One recorded call: request, outcome and position in the cassette.

    Attributes:
        sequence: Position in the cassette (0-indexed, contiguous)
        capability: Capability the call went through (e.g., "image_generator")
        method: Method that was called (e.g., "generate")
        input: The request that was made
        output: The outcome, success or failure
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    sequence: int = Field(..., ge=0, validation_alias=AliasChoices("sequence", "seq"))
    capability: str = Field(..., validation_alias=AliasChoices("capability", "port"))
    method: str = Field(...)
    input: GenerationRequest
    output: GenerationOutcome

    @field_validator("output", mode="before")
    @classmethod
    def upgrade_legacy_output(cls, v: Any) -> Any:
        """Translate the {"Ok": ...} / {"Err": ...} shape of older cassettes."""
        if not isinstance(v, dict) or "status" in v:
            return v
        for key in ("Err", "err"):
            if key in v:
                err = v[key]
                if isinstance(err, dict):
                    return {"status": "failure", "error": err}
                return {"status": "failure", "error": {"message": str(err)}}
        for key in ("Ok", "ok"):
            if key in v:
                ok = v[key] or {}
                return {"status": "success", "images": ok.get("images", [])}
        return v


class Cassette(BaseModel):
    """
    An ordered recording of generator calls plus provenance metadata.

    Attributes:
        name: Human-readable cassette name
        created_at: When recording started
        source_revision: Source revision (git commit) the recording was made from
        interactions: Recorded calls in sequence order
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(...)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        validation_alias=AliasChoices("created_at", "recorded_at"),
    )
    source_revision: str = Field(
        default="unknown",
        validation_alias=AliasChoices("source_revision", "commit"),
    )
    interactions: list[InteractionRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def ensure_timezone(self) -> "Cassette":
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=UTC)
        return self

    def check_sequence(self) -> list[str]:
        """
        Check that sequence numbers run 0..N-1 in physical order.

        Returns:
            List of problems found (empty when the cassette is consistent)
        """
        problems: list[str] = []
        seen: set[int] = set()
        for position, record in enumerate(self.interactions):
            if record.sequence in seen:
                problems.append(f"duplicate sequence {record.sequence}")
            elif record.sequence != position:
                problems.append(
                    f"interaction at position {position} has sequence {record.sequence}"
                )
            seen.add(record.sequence)
        return problems

    def snapshot(self) -> "Cassette":
        """Return a copy whose interaction list is independent of this one."""
        return self.model_copy(update={"interactions": list(self.interactions)})
