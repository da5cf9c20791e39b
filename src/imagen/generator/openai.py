"""
OpenAI generator adapter.

This module implements the ImageGenerator interface on top of the OpenAI
Images API. Images are requested as base64 JSON and tagged with the MIME
type of the requested output format.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from imagen.generator.base import ImageGenerator
from imagen.generator.http import decode_image_data, no_images_error, post_json
from imagen.model import Provider
from imagen.params import aspect_ratio_to_openai_size
from imagen.schema import GeneratedImage, GenerationRequest, ImageResponse

OPENAI_API_URL = "https://api.openai.com/v1/images/generations"


@dataclass
class OpenAIConfig:
    """Configuration for the OpenAI adapter."""

    api_key: str
    url: str = OPENAI_API_URL
    timeout_seconds: float = 120.0


class OpenAIGenerator(ImageGenerator):
    """Generator backed by the OpenAI Images API."""

    def __init__(
        self,
        config: OpenAIConfig,
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

    async def __aenter__(self) -> "OpenAIGenerator":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        """Build the images/generations request body."""
        # Pixel sizes only exist for the 1K range; larger sizes use "auto"
        if request.size == "1K":
            size = aspect_ratio_to_openai_size(request.aspect_ratio)
        else:
            size = "auto"

        return {
            "model": request.model,
            "prompt": request.prompt,
            "n": request.count,
            "size": size,
            "quality": request.quality,
            "output_format": request.format,
        }

    async def generate(self, request: GenerationRequest) -> ImageResponse:
        provider = Provider.OPENAI.value

        body, text = await post_json(
            self._get_client(),
            self.config.url,
            self.build_payload(request),
            provider=provider,
            model=request.model,
            headers={"Authorization": f"Bearer {self.config.api_key}"},
        )

        mime_type = f"image/{request.format}"
        items = body.get("data")
        if not isinstance(items, list):
            items = []
        images = [
            GeneratedImage(
                data=decode_image_data(item.get("b64_json", ""), provider=provider, model=request.model),
                mime_type=mime_type,
            )
            for item in items
            if isinstance(item, dict)
        ]

        if not images:
            raise no_images_error(text, provider=provider, model=request.model)

        return ImageResponse(images=images)
