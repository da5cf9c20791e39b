"""
Generator selection for Imagen.

Chooses, once per process, which backend serves the generation contract:
the live provider adapter, the live adapter wrapped by a recorder, or a
cassette replayer. The choice is a pure function of the values passed in;
callers hand the single resulting generator to the rest of the program.

Precedence:
    1. A replay cassette, if given (any record target is ignored)
    2. A record target, if given
    3. The live generator
"""

import logging
import subprocess
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from imagen.cassette.recorder import RecordingImageGenerator
from imagen.cassette.replayer import ReplayingImageGenerator
from imagen.cassette.store import CassetteStore
from imagen.config import Config, Settings
from imagen.errors import ConfigurationError, MissingApiKeyError
from imagen.generator.base import CAPABILITY_NAME, ImageGenerator
from imagen.generator.gemini import GeminiConfig, GeminiGenerator
from imagen.generator.openai import OpenAIConfig, OpenAIGenerator
from imagen.model import Provider

logger = logging.getLogger(__name__)


class GeneratorMode(str, Enum):
    """Which backend serves generation calls."""

    LIVE = "live"
    RECORD = "record"
    REPLAY = "replay"


def _check_signal(name: str, value: str | Path | None) -> Path | None:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        raise ConfigurationError(
            message=f"{name} cassette path is empty",
            suggestion=f"Unset the {name} signal or give it a cassette path",
        )
    return Path(value)


def resolve_mode(
    replay: str | Path | None = None,
    record: str | Path | None = None,
) -> GeneratorMode:
    """
    Decide the generator mode from the two optional signals.

    Raises:
        ConfigurationError: If the signal that decides the mode is blank
    """
    if replay is not None:
        _check_signal("replay", replay)
        return GeneratorMode.REPLAY
    if record is not None:
        _check_signal("record", record)
        return GeneratorMode.RECORD
    return GeneratorMode.LIVE


def select_generator(
    live_factory: Callable[[], ImageGenerator],
    *,
    replay: str | Path | None = None,
    record: str | Path | None = None,
    source_revision: str | None = None,
    store: CassetteStore | None = None,
) -> ImageGenerator:
    """
    Build the generator for this process.

    Args:
        live_factory: Builds the live generator; only called when needed
        replay: Cassette to replay from
        record: Cassette to record to
        source_revision: Revision label stored in new cassettes
        store: Cassette store override

    Returns:
        The live generator, a RecordingImageGenerator around it, or a
        ReplayingImageGenerator

    Raises:
        ConfigurationError: If the deciding signal is malformed
        CassetteReadError: If the replay cassette cannot be read
        CassetteCorruptError: If the replay cassette is invalid
    """
    mode = resolve_mode(replay, record)
    logger.debug("Generator mode: %s", mode.value)

    if mode == GeneratorMode.REPLAY:
        return ReplayingImageGenerator.from_path(Path(replay), store=store)

    if mode == GeneratorMode.RECORD:
        path = Path(record)
        return RecordingImageGenerator(
            live_factory(),
            path,
            name=f"{path.parent.name}-{CAPABILITY_NAME}" if path.parent.name else CAPABILITY_NAME,
            source_revision=source_revision or get_source_revision(),
            store=store,
        )

    return live_factory()


def build_live_generator(
    provider: Provider,
    config: Config,
    settings: Settings | None = None,
) -> GeminiGenerator | OpenAIGenerator:
    """
    Build the live generator for a provider.

    Raises:
        MissingApiKeyError: If no API key is configured for the provider
    """
    if provider == Provider.GEMINI:
        key = config.gemini_key(settings)
        if not key:
            raise MissingApiKeyError(provider="Gemini", env_var="GEMINI_API_KEY")
        return GeminiGenerator(GeminiConfig(api_key=key))

    key = config.openai_key(settings)
    if not key:
        raise MissingApiKeyError(provider="OpenAI", env_var="OPENAI_API_KEY")
    return OpenAIGenerator(OpenAIConfig(api_key=key))


def get_source_revision() -> str:
    """Current git commit hash, or "unknown" outside a git checkout."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
    except (OSError, subprocess.SubprocessError):
        return "unknown"
    if result.returncode != 0:
        return "unknown"
    return result.stdout.strip() or "unknown"
