"""
Output file naming and image writes.

Images are written exactly as the provider returned them; no format
conversion is attempted.
"""

import logging
import time
from pathlib import Path

from imagen.params import format_extension

logger = logging.getLogger(__name__)

# Characters of the prompt used for automatic filenames
FILENAME_PROMPT_CHARS = 50

_MIME_FORMATS = {
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/png": "png",
    "image/webp": "webp",
}


def sanitize_for_filename(text: str, max_len: int = FILENAME_PROMPT_CHARS) -> str:
    """
    Turn text into a lower-case kebab-case filename stem.

    Non-alphanumeric runs collapse into a single hyphen; leading and trailing
    hyphens are dropped. Returns "image" when nothing usable remains.
    """
    chars: list[str] = []
    last_was_hyphen = True
    for ch in text:
        if len(chars) >= max_len:
            break
        if ch.isascii() and ch.isalnum():
            chars.append(ch.lower())
            last_was_hyphen = False
        elif not last_was_hyphen:
            chars.append("-")
            last_was_hyphen = True

    result = "".join(chars).rstrip("-")
    return result or "image"


def auto_filename(prompt: str, fmt: str, timestamp: int | None = None) -> str:
    """Build "<prompt-slug>-<unix timestamp>.<ext>"."""
    stamp = int(time.time()) if timestamp is None else timestamp
    return f"{sanitize_for_filename(prompt)}-{stamp}.{format_extension(fmt)}"


def resolve_output_path(explicit: str | Path | None, prompt: str, fmt: str) -> Path:
    """Use the explicit output path, or generate one from the prompt."""
    if explicit:
        return Path(explicit)
    return Path(auto_filename(prompt, fmt))


def numbered_path(base: Path, index: int, total: int) -> Path:
    """Suffix "-1", "-2", ... onto the stem when saving several images."""
    if total <= 1:
        return base
    return base.with_name(f"{base.stem}-{index + 1}{base.suffix}")


def mime_matches_format(mime_type: str, fmt: str) -> bool:
    return _MIME_FORMATS.get(mime_type.lower()) == fmt


def save_image(data: bytes, mime_type: str, fmt: str, path: Path) -> Path:
    """
    Write raw image bytes to disk.

    Raises:
        OSError: If the file cannot be written
    """
    if not mime_matches_format(mime_type, fmt):
        logger.warning(
            "Provider returned %s but %s was requested; saving the bytes unchanged",
            mime_type,
            fmt,
        )
    if path.parent != Path("."):
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path
