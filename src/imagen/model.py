"""
Model name resolution and provider detection.

Users may pass either a short alias ("nano-banana") or a full model
identifier ("gemini-3-pro-image-preview"). The provider is derived from the
resolved identifier's prefix.
"""

from enum import Enum

from imagen.errors import InvalidArgumentError


class Provider(str, Enum):
    """Supported image generation providers."""

    GEMINI = "gemini"
    OPENAI = "openai"


# Short name aliases for popular models
MODEL_ALIASES: dict[str, str] = {
    "nano-banana": "gemini-3.1-flash-image-preview",
    "nano-banana-pro": "gemini-3-pro-image-preview",
    "gpt-1.5": "gpt-image-1.5",
    "gpt-1": "gpt-image-1",
    "gpt-1-mini": "gpt-image-1-mini",
}


def resolve_model(name: str) -> str:
    """Resolve a model alias to its full identifier; other names pass through."""
    return MODEL_ALIASES.get(name, name)


def detect_provider(model: str) -> Provider:
    """
    Detect the provider from a resolved model identifier.

    Args:
        model: Full model identifier

    Returns:
        The provider serving this model

    Raises:
        InvalidArgumentError: If the model matches no known provider prefix
    """
    if model.startswith("gemini"):
        return Provider.GEMINI
    if model.startswith("gpt-image"):
        return Provider.OPENAI
    raise InvalidArgumentError(
        message=f"Unknown provider for model '{model}'. Expected 'gemini-*' or 'gpt-image-*'.",
        argument="model",
        value=model,
        suggestion=f"Use a full model name or one of: {', '.join(MODEL_ALIASES)}",
    )
