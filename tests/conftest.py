"""
Pytest configuration and fixtures for Imagen tests.

This module provides shared fixtures used across unit and integration
tests. Plain helpers (sample bytes, the scripted fake generator) live in
tests/helpers.py.
"""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from helpers import PNG_BYTES, make_response
from imagen.schema import GenerationRequest, ImageResponse


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_request() -> GenerationRequest:
    """Return a simple Gemini generation request."""
    return GenerationRequest(
        model="gemini-3.1-flash-image-preview",
        prompt="a cat wearing a hat",
        aspect_ratio="16:9",
        format="png",
    )


@pytest.fixture
def png_response() -> ImageResponse:
    """Return a response holding one PNG image."""
    return make_response(PNG_BYTES)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Path:
    """Remove Imagen environment variables and point HOME at a temp dir."""
    for var in ("IMAGEN_REPLAY", "IMAGEN_REC", "IMAGEN_CONFIG", "GEMINI_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(temp_dir))
    return temp_dir
