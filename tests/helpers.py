"""
Shared test helpers for Imagen tests.

Provides sample image bytes and a scripted fake generator that stands in
for a live provider.
"""

from imagen.errors import GenerationError
from imagen.generator.base import ImageGenerator
from imagen.schema import GeneratedImage, GenerationRequest, ImageResponse

# Smallest valid PNG and JPEG headers; providers return opaque bytes anyway
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\xff\xd9"


class FakeGenerator(ImageGenerator):
    """
    Scripted generator used in place of a live provider.

    Each entry in ``script`` is either an ImageResponse to return or a
    GenerationError to raise; entries are consumed in call order.
    """

    def __init__(self, script: list[ImageResponse | GenerationError]) -> None:
        self.script = list(script)
        self.requests: list[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> ImageResponse:
        self.requests.append(request)
        outcome = self.script.pop(0)
        if isinstance(outcome, GenerationError):
            raise outcome
        return outcome


def make_response(*payloads: bytes, mime_type: str = "image/png") -> ImageResponse:
    """Build an ImageResponse with one image per payload."""
    return ImageResponse(images=[GeneratedImage(data=p, mime_type=mime_type) for p in payloads])
