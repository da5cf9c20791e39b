"""
Recording generator for Imagen.

RecordingImageGenerator wraps a live generator, passes every call through
unchanged and appends the request and its outcome to a cassette that is
persisted after each call.

Ordering:
    The sequence number is reserved after the delegate call completes, in
    the same critical section as the append. A call cancelled while waiting
    on its delegate never consumes a number, so cassettes stay gap-free and
    their order is completion order.
"""

import asyncio
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path

from imagen.cassette.store import CassetteStore
from imagen.errors import CassetteWriteError, GenerationError, RecordingPersistError
from imagen.generator.base import CAPABILITY_NAME, GENERATE_METHOD, ImageGenerator
from imagen.schema import (
    Cassette,
    FailureOutcome,
    GenerationRequest,
    ImageResponse,
    InteractionRecord,
    SuccessOutcome,
)

logger = logging.getLogger(__name__)


class RecordingImageGenerator(ImageGenerator):
    """
    Records image generation calls while delegating to an inner generator.

    Usage:
        live = GeminiGenerator(GeminiConfig(api_key="..."))
        recorder = RecordingImageGenerator(live, "cassettes/cat.cassette.yaml")
        response = await recorder.generate(request)

    Attributes:
        inner: The wrapped generator
        path: Cassette file rewritten after every call
        cassette: The in-memory cassette being recorded
    """

    def __init__(
        self,
        inner: ImageGenerator,
        path: str | Path,
        *,
        name: str | None = None,
        source_revision: str | None = None,
        store: CassetteStore | None = None,
    ) -> None:
        self.inner = inner
        self.path = Path(path)
        self.store = store or CassetteStore()
        self.cassette = Cassette(
            name=name or self.path.name.removesuffix(".yaml").removesuffix(".cassette"),
            created_at=datetime.now(UTC),
            source_revision=source_revision or "unknown",
        )
        self._next_sequence = 0
        self._lock = asyncio.Lock()
        # Serializes file writes and remembers the newest snapshot on disk
        self._write_lock = threading.Lock()
        self._persisted_count = 0

    async def generate(self, request: GenerationRequest) -> ImageResponse:
        """
        Delegate, record the outcome, persist, then return the outcome unchanged.

        Raises:
            GenerationError: Re-raised exactly as the delegate raised it
            RecordingPersistError: The outcome could not be saved; the
                delegate's response or error is attached
        """
        response: ImageResponse | None = None
        failure: GenerationError | None = None
        try:
            response = await self.inner.generate(request)
        except GenerationError as e:
            failure = e

        if failure is not None:
            outcome: SuccessOutcome | FailureOutcome = FailureOutcome.from_error(failure)
        else:
            outcome = SuccessOutcome.from_response(response)

        try:
            await self._record(request, outcome)
        except CassetteWriteError as e:
            raise RecordingPersistError(
                path=str(self.path),
                underlying_error=e.underlying_error or e.message,
                response=response,
                generation_error=failure,
            ) from e

        if failure is not None:
            raise failure
        return response

    async def _record(
        self,
        request: GenerationRequest,
        outcome: SuccessOutcome | FailureOutcome,
    ) -> InteractionRecord:
        async with self._lock:
            record = InteractionRecord(
                sequence=self._next_sequence,
                capability=CAPABILITY_NAME,
                method=GENERATE_METHOD,
                input=request,
                output=outcome,
            )
            self.cassette.interactions.append(record)
            self._next_sequence += 1
            snapshot = self.cassette.snapshot()
            logger.debug(
                "Recorded interaction %d (%s) for %s",
                record.sequence,
                outcome.status,
                self.path,
            )
            await asyncio.to_thread(self._persist, snapshot)
        return record

    def _persist(self, snapshot: Cassette) -> None:
        with self._write_lock:
            count = len(snapshot.interactions)
            if count <= self._persisted_count:
                # A newer snapshot is already on disk
                return
            self.store.write(snapshot, self.path)
            self._persisted_count = count

    @property
    def recorded_count(self) -> int:
        """Number of interactions recorded so far."""
        return len(self.cassette.interactions)
