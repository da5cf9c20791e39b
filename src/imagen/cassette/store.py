"""
YAML storage for Imagen cassettes.

This module is the only place that knows the on-disk cassette format.
A cassette is one YAML document holding provenance metadata and the
ordered list of recorded interactions; image bytes are stored as base64.

Design Principles:
    - Atomic: A cassette is written to a temporary file and renamed into place,
      so readers never observe a half-written file
    - Validated: Reads reject cassettes whose sequence numbers are not 0..N-1
    - Self-contained: One .cassette.yaml file holds everything needed to replay
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from imagen.errors import CassetteCorruptError, CassetteReadError, CassetteWriteError
from imagen.schema import Cassette

logger = logging.getLogger(__name__)

# Filename suffix for cassette files
CASSETTE_SUFFIX = ".cassette.yaml"


def dump_cassette(cassette: Cassette) -> str:
    """
    Encode a cassette as YAML text.

    Output is pure ASCII. Non-ASCII and control characters, U+0085
    included, are written as double-quoted escapes and load back unchanged.
    """
    data = cassette.model_dump(mode="json")
    return yaml.safe_dump(data, sort_keys=False)


def load_cassette_text(content: str, source: str = "<string>") -> Cassette:
    """
    Decode and validate a cassette from YAML text.

    Args:
        content: YAML text
        source: Where the text came from, for error messages

    Returns:
        Validated Cassette

    Raises:
        CassetteCorruptError: If the text is not a valid, contiguous cassette
    """
    try:
        data: Any = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise CassetteCorruptError(path=source, problems=[f"invalid YAML: {e}"]) from e

    if not isinstance(data, dict):
        raise CassetteCorruptError(path=source, problems=["top level is not a mapping"])

    try:
        cassette = Cassette.model_validate(data)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise CassetteCorruptError(path=source, problems=problems) from e

    problems = cassette.check_sequence()
    if problems:
        raise CassetteCorruptError(path=source, problems=problems)

    return cassette


class CassetteStore:
    """
    Reads and writes cassette files.

    Usage:
        store = CassetteStore()
        store.write(cassette, "fixtures/cat.cassette.yaml")
        cassette = store.read("fixtures/cat.cassette.yaml")
    """

    def write(self, cassette: Cassette, path: str | Path) -> Path:
        """
        Write a cassette atomically.

        Args:
            cassette: The cassette to persist
            path: Destination file; parent directories are created

        Returns:
            The path that was written

        Raises:
            CassetteWriteError: If encoding or any filesystem step fails
        """
        path = Path(path)
        tmp_name: str | None = None
        try:
            content = dump_cassette(cassette)
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, yaml.YAMLError) as e:
            raise CassetteWriteError(path=str(path), underlying_error=str(e)) from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        logger.debug(
            "Wrote cassette %s (%d interactions)", path, len(cassette.interactions)
        )
        return path

    def read(self, path: str | Path) -> Cassette:
        """
        Read and validate a cassette.

        Args:
            path: Cassette file to load

        Returns:
            Validated Cassette

        Raises:
            CassetteReadError: If the file cannot be read
            CassetteCorruptError: If the content is invalid or non-contiguous
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CassetteReadError(path=str(path), underlying_error=str(e)) from e

        cassette = load_cassette_text(content, source=str(path))
        logger.debug(
            "Loaded cassette %s (%d interactions)", path, len(cassette.interactions)
        )
        return cassette
