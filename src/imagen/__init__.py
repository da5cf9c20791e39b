"""
Imagen - Unified command-line client for AI image generation.

Imagen puts one stable "generate an image" capability in front of the
volatile HTTP APIs of Google Gemini and OpenAI.
It provides:
- A single async generation contract shared by every backend
- Recording of live traffic to YAML cassettes
- Deterministic replay of cassettes with zero network access
- Model aliases, parameter validation and automatic output naming

Example usage:
    $ imagen "a cat wearing a hat" --model nano-banana
    $ IMAGEN_REC=1 imagen "a cat" --model gpt-1
    $ IMAGEN_REPLAY=cat.cassette.yaml imagen "a cat"
"""

__version__ = "0.1.0"
__author__ = "Imagen Contributors"

__all__ = [
    "__version__",
    "__author__",
]
