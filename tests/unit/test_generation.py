"""Tests for ValidatedGenerator: breaker-guarded, validated LLM calls."""

from __future__ import annotations

import json

import pytest

from gapminer.circuit_breaker import (
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    CircuitState,
    get_registry,
    install_default_fallbacks,
)
from gapminer.generation import REJECTED_MESSAGE, GenerationStatus, ValidatedGenerator
from gapminer.llm_client import LLMClient, LLMClientError, MockLLMClient
from gapminer.validation import ValidationTask

VALID_GAPS = json.dumps(
    [
        {
            "problem": "Scaling laws are not validated beyond ten billion parameters",
            "type": "evaluation",
            "confidence": 0.8,
        }
    ]
)
INVALID_GAPS = "[this is {not} json]"


class TestMockLLMClient:
    """The mock client used throughout these tests."""

    @pytest.mark.asyncio
    async def test_script_then_keyed_then_default(self) -> None:
        client = MockLLMClient(
            responses={"gaps": "keyed"},
            default_response="default",
            script=["scripted"],
        )
        assert await client.send_message("extract gaps") == "scripted"
        assert await client.send_message("extract gaps") == "keyed"
        assert await client.send_message("other") == "default"
        assert client.get_call_count() == 3

    @pytest.mark.asyncio
    async def test_scripted_exception_is_raised(self) -> None:
        client = MockLLMClient(script=[LLMClientError("quota exceeded")])
        with pytest.raises(LLMClientError, match="quota exceeded"):
            await client.send_message("prompt")

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MockLLMClient(), LLMClient)

    @pytest.mark.asyncio
    async def test_reset_clears_history(self) -> None:
        client = MockLLMClient()
        await client.send_message("prompt")
        client.reset()
        assert client.get_call_count() == 0


class TestValidatedGenerator:
    """Composition of breaker, client and validator."""

    @pytest.fixture
    def registry(self) -> CircuitBreakerRegistry:
        return CircuitBreakerRegistry()

    @pytest.mark.asyncio
    async def test_accepts_valid_response(self, registry: CircuitBreakerRegistry) -> None:
        client = MockLLMClient(default_response=VALID_GAPS)
        generator = ValidatedGenerator(client, registry)

        outcome = await generator.generate("Extract gaps", ValidationTask.GAP_EXTRACTION)

        assert outcome.accepted
        assert outcome.attempts == 1
        assert outcome.data[0]["type"] == "evaluation"
        assert outcome.validation is not None and outcome.validation.is_valid
        assert outcome.circuit_state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_retries_after_rejected_response(
        self, registry: CircuitBreakerRegistry
    ) -> None:
        client = MockLLMClient(script=[INVALID_GAPS, VALID_GAPS])
        generator = ValidatedGenerator(client, registry)

        outcome = await generator.generate("Extract gaps", "gap_extraction")

        assert outcome.status == GenerationStatus.ACCEPTED
        assert outcome.attempts == 2
        assert [v.is_valid for v in outcome.history] == [False, True]
        assert client.get_call_count() == 2

    @pytest.mark.asyncio
    async def test_rejects_after_max_attempts(self, registry: CircuitBreakerRegistry) -> None:
        client = MockLLMClient(default_response=INVALID_GAPS)
        generator = ValidatedGenerator(client, registry, max_attempts=3)

        outcome = await generator.generate("Extract gaps", ValidationTask.GAP_EXTRACTION)

        assert outcome.status == GenerationStatus.REJECTED
        assert outcome.error == REJECTED_MESSAGE
        assert outcome.attempts == 3
        assert len(outcome.history) == 3
        metrics = registry.get_breaker("gemini-api").get_metrics()
        # Rejected responses are successful calls as far as the breaker is concerned
        assert metrics.total_requests == 3
        assert metrics.failure_count == 0

    @pytest.mark.asyncio
    async def test_client_error_is_unavailable(self, registry: CircuitBreakerRegistry) -> None:
        client = MockLLMClient(script=[LLMClientError("quota exceeded")])
        generator = ValidatedGenerator(client, registry)

        outcome = await generator.generate("Extract gaps", ValidationTask.GAP_EXTRACTION)

        assert outcome.status == GenerationStatus.UNAVAILABLE
        assert outcome.error == "quota exceeded"
        assert outcome.attempts == 1
        assert registry.get_breaker("gemini-api").get_metrics().failure_count == 1

    @pytest.mark.asyncio
    async def test_fallback_answer_is_degraded(self, registry: CircuitBreakerRegistry) -> None:
        install_default_fallbacks(registry)
        client = MockLLMClient(script=[LLMClientError("quota exceeded")])
        generator = ValidatedGenerator(client, registry)

        outcome = await generator.generate(
            "Extract gaps", ValidationTask.GAP_EXTRACTION, operation="extract-gaps"
        )

        assert outcome.status == GenerationStatus.DEGRADED
        assert outcome.data["type"] == "fallback_response"
        assert outcome.data["context"]["operation"] == "extract-gaps"
        assert outcome.data["context"]["metadata"] == {"attempt": 1, "model": "mock"}

    @pytest.mark.asyncio
    async def test_open_circuit_skips_client(self, registry: CircuitBreakerRegistry) -> None:
        registry.get_breaker("gemini-api").force_open()
        client = MockLLMClient(default_response=VALID_GAPS)
        generator = ValidatedGenerator(client, registry)

        outcome = await generator.generate("Extract gaps", ValidationTask.GAP_EXTRACTION)

        assert outcome.status == GenerationStatus.UNAVAILABLE
        assert outcome.circuit_state == CircuitState.OPEN
        assert client.get_call_count() == 0

    @pytest.mark.asyncio
    async def test_repeated_outages_trip_the_breaker(
        self, registry: CircuitBreakerRegistry
    ) -> None:
        registry.get_breaker("gemini-api", CircuitBreakerConfig(failure_threshold=2))
        client = MockLLMClient(script=[LLMClientError("down"), LLMClientError("down")])
        generator = ValidatedGenerator(client, registry)

        await generator.generate("p", ValidationTask.GAP_EXTRACTION)
        outcome = await generator.generate("p", ValidationTask.GAP_EXTRACTION)

        assert outcome.circuit_state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_uses_injected_empty_registry(self, registry: CircuitBreakerRegistry) -> None:
        assert len(registry) == 0
        generator = ValidatedGenerator(MockLLMClient(default_response=VALID_GAPS), registry)

        await generator.generate("p", ValidationTask.GAP_EXTRACTION)

        assert generator.registry is registry
        assert "gemini-api" in registry
        assert "gemini-api" not in get_registry()

    @pytest.mark.asyncio
    async def test_uses_process_registry_by_default(self) -> None:
        generator = ValidatedGenerator(MockLLMClient(default_response=VALID_GAPS))
        await generator.generate("p", ValidationTask.GAP_EXTRACTION)
        assert "gemini-api" in get_registry()

    @pytest.mark.asyncio
    async def test_proposal_task(self, registry: CircuitBreakerRegistry) -> None:
        proposal = {
            "title": "Grounded evaluation of scaling laws",
            "abstract": "We propose a benchmark suite that tests whether scaling laws "
            "hold for multilingual scientific text.",
            "motivation": "This is why unvalidated extrapolation is costly for labs.",
            "methodology": "Step 1: collect corpora. Step 2: fit exponents.",
        }
        client = MockLLMClient(default_response=json.dumps(proposal))
        generator = ValidatedGenerator(client, registry)

        outcome = await generator.generate("Draft", ValidationTask.RESEARCH_PROPOSAL)
        assert outcome.accepted
        assert outcome.data["title"] == proposal["title"]

    def test_max_attempts_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            ValidatedGenerator(MockLLMClient(), max_attempts=0)
