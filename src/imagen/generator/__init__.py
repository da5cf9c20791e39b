"""
Generator module for Imagen.

This module contains the generation contract and the live adapters that
talk to provider APIs over HTTP.

Available generators:
    - GeminiGenerator: Google Gemini (generateContent with IMAGE modality)
    - OpenAIGenerator: OpenAI Images API (b64_json responses)

Record and replay backends live in imagen.cassette.
"""

from imagen.generator.base import CAPABILITY_NAME, GENERATE_METHOD, ImageGenerator
from imagen.generator.gemini import GeminiGenerator
from imagen.generator.openai import OpenAIGenerator

__all__ = [
    "CAPABILITY_NAME",
    "GENERATE_METHOD",
    "GeminiGenerator",
    "ImageGenerator",
    "OpenAIGenerator",
]
