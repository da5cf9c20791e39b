"""
HTTP helpers shared by the live generators.

Every provider speaks JSON over HTTPS and returns base64 image payloads.
These helpers turn transport problems and non-2xx answers into
GenerationError subclasses so adapters only deal with the happy path.
"""

import base64
import binascii
import json
import logging
from typing import Any

import httpx

from imagen.errors import ProviderApiError, ProviderNetworkError

logger = logging.getLogger(__name__)

# Longest response body quoted in error messages
MAX_ERROR_BODY = 500


def truncate_body(text: str, limit: int = MAX_ERROR_BODY) -> str:
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text


async def post_json(
    client: httpx.AsyncClient,
    url: str,
    payload: dict[str, Any],
    *,
    provider: str,
    model: str,
    headers: dict[str, str] | None = None,
) -> tuple[dict[str, Any], str]:
    """
    POST a JSON payload and parse the JSON answer.

    Returns:
        Tuple of (parsed body, raw body text)

    Raises:
        ProviderNetworkError: The request could not be completed
        ProviderApiError: Non-2xx status or a body that is not a JSON object
    """
    logger.debug("POST %s (provider=%s, model=%s)", url, provider, model)
    try:
        response = await client.post(url, json=payload, headers=headers)
    except httpx.TimeoutException as e:
        raise ProviderNetworkError(
            provider=provider,
            model=model,
            underlying_error=f"request timed out: {e}",
        ) from e
    except httpx.HTTPError as e:
        raise ProviderNetworkError(
            provider=provider,
            model=model,
            underlying_error=str(e),
        ) from e

    text = response.text
    if not response.is_success:
        raise ProviderApiError(
            message=f"API error ({response.status_code}): {truncate_body(text)}",
            provider=provider,
            model=model,
            status=response.status_code,
        )

    try:
        body = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProviderApiError(
            message=f"Failed to parse response: {e}",
            provider=provider,
            model=model,
            status=response.status_code,
        ) from e
    if not isinstance(body, dict):
        raise ProviderApiError(
            message=f"Unexpected response shape: {truncate_body(text)}",
            provider=provider,
            model=model,
            status=response.status_code,
        )
    return body, text


def decode_image_data(data: str, *, provider: str, model: str) -> bytes:
    """Decode a base64 image payload from a provider response."""
    if not isinstance(data, str) or not data:
        raise ProviderApiError(
            message="Image payload missing from response",
            provider=provider,
            model=model,
            status=200,
        )
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise ProviderApiError(
            message=f"Failed to decode base64: {e}",
            provider=provider,
            model=model,
            status=200,
        ) from e


def no_images_error(text: str, *, provider: str, model: str) -> ProviderApiError:
    return ProviderApiError(
        message=f"No images in response. Body: {truncate_body(text)}",
        provider=provider,
        model=model,
        status=200,
    )
