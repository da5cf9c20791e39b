"""
Parameter validation and translation between CLI inputs and provider formats.
"""

from imagen.errors import InvalidArgumentError
from imagen.model import Provider

GEMINI_ASPECT_RATIOS = ("1:1", "2:3", "3:2", "3:4", "4:3", "4:5", "5:4", "9:16", "16:9", "21:9")
OPENAI_ASPECT_RATIOS = ("1:1", "16:9", "9:16", "3:2", "2:3", "4:3", "3:4", "5:4", "4:5", "21:9")
SIZES = ("1K", "2K", "4K")
QUALITIES = ("auto", "low", "medium", "high")
FORMATS = ("jpeg", "png", "webp")
THINKING_LEVELS = ("none", "minimal", "low", "medium", "high")

# OpenAI supports 1024x1024, 1536x1024, 1024x1536 and auto
_LANDSCAPE = ("16:9", "3:2", "4:3", "21:9", "5:4")
_PORTRAIT = ("9:16", "2:3", "3:4", "4:5")


def aspect_ratio_to_openai_size(ratio: str) -> str:
    """Translate an aspect ratio to OpenAI pixel dimensions."""
    if ratio == "1:1":
        return "1024x1024"
    if ratio in _LANDSCAPE:
        return "1536x1024"
    if ratio in _PORTRAIT:
        return "1024x1536"
    return "auto"


def _check(argument: str, value: str, valid: tuple[str, ...], label: str) -> None:
    if value not in valid:
        raise InvalidArgumentError(
            message=f"Unsupported {label} '{value}'. Valid: {', '.join(valid)}",
            argument=argument,
            value=value,
        )


def validate_aspect_ratio(ratio: str, provider: Provider) -> None:
    """Validate that an aspect ratio is supported by the given provider."""
    valid = GEMINI_ASPECT_RATIOS if provider == Provider.GEMINI else OPENAI_ASPECT_RATIOS
    if ratio not in valid:
        raise InvalidArgumentError(
            message=f"Unsupported aspect ratio '{ratio}' for {provider.value}. Valid: {', '.join(valid)}",
            argument="aspect_ratio",
            value=ratio,
        )


def validate_size(size: str) -> None:
    _check("size", size, SIZES, "size")


def validate_quality(quality: str) -> None:
    _check("quality", quality, QUALITIES, "quality")


def validate_format(fmt: str) -> None:
    _check("format", fmt, FORMATS, "format")


def validate_thinking(thinking: str, provider: Provider) -> None:
    """Validate the thinking level, which only Gemini models accept."""
    if provider != Provider.GEMINI:
        raise InvalidArgumentError(
            message="--thinking is only supported for Gemini models",
            argument="thinking",
            value=thinking,
        )
    _check("thinking", thinking, THINKING_LEVELS, "thinking level")


def format_extension(fmt: str) -> str:
    """Get the file extension for an output format (jpeg and unknown formats map to jpg)."""
    if fmt in ("png", "webp"):
        return fmt
    return "jpg"
