"""
Tests for the replaying generator.

Tests:
    - Outcomes served in recorded order
    - Recorded failures raised again, equal to the originals
    - Exhaustion and unknown capability errors
    - Requests are not compared with recorded inputs
"""

from pathlib import Path

import pytest

from helpers import PNG_BYTES, make_response
from imagen.cassette.replayer import ReplayCursor, ReplayingImageGenerator
from imagen.cassette.store import CassetteStore
from imagen.errors import (
    CassetteExhaustedError,
    CassetteReadError,
    ProviderApiError,
    ProviderNetworkError,
    UnknownCapabilityError,
)
from imagen.schema import (
    Cassette,
    FailureOutcome,
    GenerationRequest,
    InteractionRecord,
    SuccessOutcome,
)


def record(sequence: int, request: GenerationRequest, outcome, capability: str = "image_generator") -> InteractionRecord:
    return InteractionRecord(
        sequence=sequence,
        capability=capability,
        method="generate",
        input=request,
        output=outcome,
    )


@pytest.fixture
def failure() -> ProviderApiError:
    return ProviderApiError(message="API error (500): down", provider="gemini", model="m", status=500)


@pytest.fixture
def cassette(sample_request: GenerationRequest, failure: ProviderApiError) -> Cassette:
    return Cassette(
        name="replay",
        interactions=[
            record(0, sample_request, SuccessOutcome.from_response(make_response(b"first"))),
            record(1, sample_request, SuccessOutcome.from_response(make_response(b"second"))),
            record(2, sample_request, FailureOutcome.from_error(failure)),
        ],
    )


class TestReplayCursor:
    """Tests for ReplayCursor."""

    def test_pops_in_order_then_exhausts(self, cassette: Cassette) -> None:
        cursor = ReplayCursor("image_generator", "generate", list(cassette.interactions))
        assert [cursor.pop().sequence for _ in range(3)] == [0, 1, 2]
        assert cursor.remaining == 0
        with pytest.raises(CassetteExhaustedError) as exc_info:
            cursor.pop()
        assert exc_info.value.recorded == 3


class TestReplayingGenerator:
    """Tests for ReplayingImageGenerator."""

    @pytest.mark.asyncio
    async def test_serves_recorded_sequence(
        self, cassette: Cassette, sample_request: GenerationRequest, failure: ProviderApiError
    ) -> None:
        replayer = ReplayingImageGenerator(cassette)

        first = await replayer.generate(sample_request)
        second = await replayer.generate(sample_request)
        with pytest.raises(ProviderApiError) as exc_info:
            await replayer.generate(sample_request)

        assert first.images[0].data == b"first"
        assert second.images[0].data == b"second"
        assert exc_info.value == failure
        assert replayer.remaining() == 0

    @pytest.mark.asyncio
    async def test_exhausted_after_last_interaction(
        self, cassette: Cassette, sample_request: GenerationRequest
    ) -> None:
        replayer = ReplayingImageGenerator(cassette)
        for _ in range(2):
            await replayer.generate(sample_request)
        with pytest.raises(ProviderApiError):
            await replayer.generate(sample_request)

        with pytest.raises(CassetteExhaustedError) as exc_info:
            await replayer.generate(sample_request)
        assert exc_info.value.capability == "image_generator"
        assert exc_info.value.method == "generate"

    @pytest.mark.asyncio
    async def test_ignores_request_contents(self, cassette: Cassette) -> None:
        """Matching is positional; a different prompt still gets the next record."""
        replayer = ReplayingImageGenerator(cassette)
        other = GenerationRequest(model="gpt-image-1", prompt="something else entirely")
        response = await replayer.generate(other)
        assert response.images[0].data == b"first"

    @pytest.mark.asyncio
    async def test_empty_cassette_is_unknown_capability(self, sample_request: GenerationRequest) -> None:
        replayer = ReplayingImageGenerator(Cassette(name="empty"))
        with pytest.raises(UnknownCapabilityError) as exc_info:
            await replayer.generate(sample_request)
        assert exc_info.value.available == []

    @pytest.mark.asyncio
    async def test_other_capabilities_are_not_served(self, sample_request: GenerationRequest) -> None:
        cassette = Cassette(
            name="mixed",
            interactions=[record(0, sample_request, SuccessOutcome(images=[]), capability="upscaler")],
        )
        replayer = ReplayingImageGenerator(cassette)
        with pytest.raises(UnknownCapabilityError) as exc_info:
            await replayer.generate(sample_request)
        assert exc_info.value.available == ["upscaler::generate"]

    @pytest.mark.asyncio
    async def test_network_failure_replays_as_network_error(self, sample_request: GenerationRequest) -> None:
        error = ProviderNetworkError(provider="openai", model="gpt-image-1", underlying_error="reset")
        replayer = ReplayingImageGenerator(
            Cassette(name="net", interactions=[record(0, sample_request, FailureOutcome.from_error(error))])
        )
        with pytest.raises(ProviderNetworkError) as exc_info:
            await replayer.generate(sample_request)
        assert exc_info.value == error

    def test_next_interaction_by_name(self, cassette: Cassette) -> None:
        replayer = ReplayingImageGenerator(cassette)
        assert replayer.next_interaction("image_generator", "generate").sequence == 0
        assert replayer.remaining("image_generator", "generate") == 2


class TestReplayFromFile:
    """Tests for loading a replayer from disk."""

    @pytest.mark.asyncio
    async def test_from_path(self, cassette: Cassette, sample_request: GenerationRequest, temp_dir: Path) -> None:
        path = CassetteStore().write(cassette, temp_dir / "r.cassette.yaml")
        replayer = ReplayingImageGenerator.from_path(path)
        response = await replayer.generate(sample_request)
        assert response.images[0].data == b"first"

    def test_missing_file(self, temp_dir: Path) -> None:
        with pytest.raises(CassetteReadError):
            ReplayingImageGenerator.from_path(temp_dir / "missing.cassette.yaml")

    @pytest.mark.asyncio
    async def test_binary_bytes_survive_the_file(self, sample_request: GenerationRequest, temp_dir: Path) -> None:
        cassette = Cassette(
            name="png",
            interactions=[record(0, sample_request, SuccessOutcome.from_response(make_response(PNG_BYTES)))],
        )
        path = CassetteStore().write(cassette, temp_dir / "png.cassette.yaml")
        response = await ReplayingImageGenerator.from_path(path).generate(sample_request)
        assert response.images[0].data == PNG_BYTES
        assert response.images[0].mime_type == "image/png"
