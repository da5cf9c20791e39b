"""
Configuration for Imagen.

Two sources feed the CLI:
- Config: the optional TOML file (API keys and default parameters)
- Settings: environment variables (API keys, record/replay signals, config path)

Environment values always win over the file.

Example config.toml:
    [keys]
    gemini = "..."
    openai = "..."

    [defaults]
    model = "nano-banana"
    aspect_ratio = "16:9"
"""

import os
import tomllib
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from imagen.errors import ConfigFileError

# Where `IMAGEN_REC=1` recordings are written
DEFAULT_CASSETTE_DIR = Path(".imagen") / "cassettes"
DEFAULT_CASSETTE_FILENAME = "image_generator.cassette.yaml"

_TRUE_VALUES = frozenset({"1", "true", "yes"})
_FALSE_VALUES = frozenset({"", "0", "false", "no"})


class KeysConfig(BaseModel):
    """API keys from the config file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    gemini: str | None = None
    openai: str | None = None


class DefaultsConfig(BaseModel):
    """Default parameter values used when a CLI option is not given."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str = "nano-banana"
    aspect_ratio: str = "1:1"
    size: str = "1K"
    quality: str = "auto"
    format: str = "jpeg"


class Config(BaseModel):
    """
    Top-level config file contents.

    Attributes:
        keys: API keys per provider
        defaults: Default generation parameters
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    keys: KeysConfig = Field(default_factory=KeysConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, path: Path | str) -> "Config":
        """
        Load configuration from a TOML file, or return defaults if it is missing.

        Raises:
            ConfigFileError: If the file exists but cannot be read or parsed
        """
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
            return cls.model_validate(data)
        except (OSError, tomllib.TOMLDecodeError, ValidationError) as e:
            raise ConfigFileError(path=str(path), underlying_error=str(e)) from e

    def gemini_key(self, settings: "Settings | None" = None) -> str | None:
        """Gemini API key, preferring the environment."""
        env = settings.gemini_api_key if settings is not None else None
        return env or self.keys.gemini

    def openai_key(self, settings: "Settings | None" = None) -> str | None:
        """OpenAI API key, preferring the environment."""
        env = settings.openai_api_key if settings is not None else None
        return env or self.keys.openai


class Settings(BaseSettings):
    """
    Environment variables read by Imagen.

    Attributes:
        replay: IMAGEN_REPLAY, cassette file to replay
        record: IMAGEN_REC, "1"/"true" or a cassette path to record to
        config_path: IMAGEN_CONFIG, config file override
        gemini_api_key: GEMINI_API_KEY
        openai_api_key: OPENAI_API_KEY
    """

    model_config = SettingsConfigDict(env_prefix="", extra="ignore", populate_by_name=True)

    replay: str | None = Field(default=None, validation_alias="IMAGEN_REPLAY")
    record: str | None = Field(default=None, validation_alias="IMAGEN_REC")
    config_path: str | None = Field(default=None, validation_alias="IMAGEN_CONFIG")
    gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")

    def record_target(self, now: datetime | None = None) -> Path | None:
        """
        Resolve IMAGEN_REC to a cassette path.

        "1", "true" and "yes" select a timestamped file under .imagen/cassettes;
        empty, "0", "false" and "no" disable recording; anything else is a path.
        """
        if self.record is None:
            return None
        value = self.record.strip()
        if value.lower() in _FALSE_VALUES:
            return None
        if value.lower() in _TRUE_VALUES:
            return default_cassette_path(now)
        return Path(value)


def default_cassette_path(now: datetime | None = None) -> Path:
    """Timestamped cassette path for a new recording session."""
    stamp = (now or datetime.now(UTC)).strftime("%Y-%m-%dT%H-%M-%S")
    return DEFAULT_CASSETTE_DIR / stamp / DEFAULT_CASSETTE_FILENAME


def discover_config_path(explicit: str | Path | None = None, settings: Settings | None = None) -> Path:
    """
    Discover the config file path.

    Resolution order:
        1. Explicit path (from --config)
        2. IMAGEN_CONFIG environment variable
        3. ~/.config/imagen/config.toml
        4. imagen.toml in the current directory when HOME is unset
    """
    if explicit:
        return Path(explicit)
    if settings is not None and settings.config_path:
        return Path(settings.config_path)
    home = os.environ.get("HOME")
    if home:
        return Path(home) / ".config" / "imagen" / "config.toml"
    return Path("imagen.toml")
