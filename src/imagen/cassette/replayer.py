"""
Replaying generator for Imagen.

The ReplayingImageGenerator serves recorded outcomes from a cassette
instead of calling a provider. It is loaded once and never touches the
network or the disk afterwards.

Design Principles:
    - Bit-exact: Replays return exactly what was stored, failures included
    - Positional: Interactions are served in recorded order, one per call;
      the incoming request is not compared with the recorded one
    - Fail-safe: Running past the end of a cassette is an error, never a wrap
"""

import logging
import threading
from collections import deque
from pathlib import Path

from imagen.cassette.store import CassetteStore
from imagen.errors import CassetteExhaustedError, UnknownCapabilityError
from imagen.generator.base import CAPABILITY_NAME, GENERATE_METHOD, ImageGenerator
from imagen.schema import Cassette, GenerationRequest, ImageResponse, InteractionRecord

logger = logging.getLogger(__name__)


class ReplayCursor:
    """
    FIFO queue of the remaining interactions for one capability/method pair.

    Attributes:
        capability: Capability the interactions were recorded for
        method: Method the interactions were recorded for
        recorded: Number of interactions the cursor started with
    """

    def __init__(
        self,
        capability: str,
        method: str,
        records: list[InteractionRecord],
    ) -> None:
        self.capability = capability
        self.method = method
        self.recorded = len(records)
        self._queue: deque[InteractionRecord] = deque(records)
        self._lock = threading.Lock()

    def pop(self) -> InteractionRecord:
        """
        Take the next recorded interaction.

        Raises:
            CassetteExhaustedError: If every interaction has been consumed
        """
        with self._lock:
            if not self._queue:
                raise CassetteExhaustedError(
                    capability=self.capability,
                    method=self.method,
                    recorded=self.recorded,
                )
            return self._queue.popleft()

    @property
    def remaining(self) -> int:
        with self._lock:
            return len(self._queue)


class ReplayingImageGenerator(ImageGenerator):
    """
    Serves recorded image generation results from a cassette.

    Usage:
        generator = ReplayingImageGenerator.from_path("fixtures/cat.cassette.yaml")
        response = await generator.generate(request)

    Attributes:
        cassette: The loaded cassette (never modified)
    """

    def __init__(self, cassette: Cassette) -> None:
        self.cassette = cassette
        grouped: dict[tuple[str, str], list[InteractionRecord]] = {}
        for record in cassette.interactions:
            grouped.setdefault((record.capability, record.method), []).append(record)
        self._cursors = {
            key: ReplayCursor(key[0], key[1], records) for key, records in grouped.items()
        }

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        store: CassetteStore | None = None,
    ) -> "ReplayingImageGenerator":
        """
        Load a cassette file and build a replaying generator.

        Raises:
            CassetteReadError: If the file cannot be read
            CassetteCorruptError: If the cassette is invalid
        """
        cassette = (store or CassetteStore()).read(path)
        logger.debug("Replaying %d interactions from %s", len(cassette.interactions), path)
        return cls(cassette)

    def next_interaction(self, capability: str, method: str) -> InteractionRecord:
        """
        Return the next recorded interaction for a capability and method.

        Raises:
            UnknownCapabilityError: If nothing was recorded for the pair
            CassetteExhaustedError: If the pair's interactions are used up
        """
        cursor = self._cursors.get((capability, method))
        if cursor is None:
            raise UnknownCapabilityError(
                capability=capability,
                method=method,
                available=sorted(f"{c}::{m}" for c, m in self._cursors),
            )
        return cursor.pop()

    def remaining(self, capability: str = CAPABILITY_NAME, method: str = GENERATE_METHOD) -> int:
        """Number of interactions not yet served for a capability and method."""
        cursor = self._cursors.get((capability, method))
        return cursor.remaining if cursor is not None else 0

    async def generate(self, request: GenerationRequest) -> ImageResponse:
        record = self.next_interaction(CAPABILITY_NAME, GENERATE_METHOD)
        logger.debug("Replaying interaction %d (%s)", record.sequence, record.output.status)
        return record.output.replay()
