"""
Gemini generator adapter.

This module implements the ImageGenerator interface on top of the Google
Gemini generateContent endpoint with the IMAGE response modality.

Usage:
    from imagen.generator.gemini import GeminiConfig, GeminiGenerator

    async with GeminiGenerator(GeminiConfig(api_key="...")) as generator:
        response = await generator.generate(request)
"""

from dataclasses import dataclass
from typing import Any

import httpx

from imagen.generator.base import ImageGenerator
from imagen.generator.http import decode_image_data, no_images_error, post_json
from imagen.model import Provider
from imagen.schema import GeneratedImage, GenerationRequest, ImageResponse

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


def _inline_parts(body: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Collect the inlineData objects of every candidate.

    Entries of the wrong JSON type are skipped; the caller reports an empty
    result as a missing-images error.
    """
    found: list[dict[str, Any]] = []
    candidates = body.get("candidates")
    if not isinstance(candidates, list):
        return found
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        content = candidate.get("content")
        if not isinstance(content, dict):
            continue
        parts = content.get("parts")
        if not isinstance(parts, list):
            continue
        for part in parts:
            if isinstance(part, dict) and isinstance(part.get("inlineData"), dict):
                found.append(part["inlineData"])
    return found


@dataclass
class GeminiConfig:
    """Configuration for the Gemini adapter."""

    api_key: str
    base_url: str = GEMINI_API_BASE
    timeout_seconds: float = 120.0


class GeminiGenerator(ImageGenerator):
    """
    Generator backed by the Google Gemini API.

    Each inline image part of each candidate becomes one GeneratedImage,
    keeping the MIME type the API reports.
    """

    def __init__(
        self,
        config: GeminiConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GeminiGenerator":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        """Build the generateContent request body."""
        generation_config: dict[str, Any] = {
            "responseModalities": ["IMAGE"],
            "imageConfig": {
                "aspectRatio": request.aspect_ratio,
                "imageSize": request.size,
            },
        }
        if request.thinking is not None:
            generation_config["thinkingConfig"] = {"thinkingLevel": request.thinking.upper()}

        return {
            "contents": [{"parts": [{"text": request.prompt}]}],
            "generationConfig": generation_config,
        }

    async def generate(self, request: GenerationRequest) -> ImageResponse:
        url = f"{self.config.base_url}/{request.model}:generateContent"
        provider = Provider.GEMINI.value

        body, text = await post_json(
            self._get_client(),
            url,
            self.build_payload(request),
            provider=provider,
            model=request.model,
            headers={"x-goog-api-key": self.config.api_key},
        )

        images: list[GeneratedImage] = []
        for part in _inline_parts(body):
            data = decode_image_data(part.get("data", ""), provider=provider, model=request.model)
            mime_type = part.get("mimeType")
            if not isinstance(mime_type, str) or not mime_type:
                mime_type = "image/png"
            images.append(GeneratedImage(data=data, mime_type=mime_type))

        if not images:
            raise no_images_error(text, provider=provider, model=request.model)

        return ImageResponse(images=images)
