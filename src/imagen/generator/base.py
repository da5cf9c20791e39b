"""
Base class for Imagen generators.

This module defines the single-method contract every image generation
backend implements. Callers hold an ImageGenerator and never inspect
which concrete backend they were given.

Implementations:
    - GeminiGenerator: Google Gemini API
    - OpenAIGenerator: OpenAI Images API
    - RecordingImageGenerator: Wraps another generator and records calls
    - ReplayingImageGenerator: Serves calls from a recorded cassette

Design Principles:
    - One async method, no shared base state
    - Failures are raised as GenerationError, never returned
    - Wrappers own their delegate instead of inheriting from it
"""

from abc import ABC, abstractmethod

from imagen.schema import GenerationRequest, ImageResponse

# Identifiers written into cassettes for calls made through this contract
CAPABILITY_NAME = "image_generator"
GENERATE_METHOD = "generate"


class ImageGenerator(ABC):
    """
    Abstract base class for image generators.

    Example Implementation:
        class StaticGenerator(ImageGenerator):
            async def generate(self, request):
                return ImageResponse(images=[GeneratedImage(data=b"...", mime_type="image/png")])
    """

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> ImageResponse:
        """
        Generate images for the given request.

        Args:
            request: What to generate

        Returns:
            ImageResponse with one or more images

        Raises:
            GenerationError: The provider failed to produce images
        """
        ...

    def get_name(self) -> str:
        """Return the generator's name for logging."""
        return self.__class__.__name__
