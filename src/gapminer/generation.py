"""Validated LLM generation.

Composes the two halves of the resilience core the way application code
uses them: the LLM call runs through the service's circuit breaker, the raw
text goes through the task validator, and the result is accepted, retried
or rejected. Retries live here, in the caller, never in the breaker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .circuit_breaker import CircuitBreakerRegistry, CircuitState, get_registry
from .llm_client import LLMClient
from .validation import ValidationResult, ValidationTask, ValidatorConfig, validate_response

logger = logging.getLogger(__name__)

REJECTED_MESSAGE = "Could not produce a reliable analysis"


class GenerationStatus(Enum):
    """Final status of a validated generation."""

    ACCEPTED = "accepted"  # LLM output passed validation
    DEGRADED = "degraded"  # A fallback answered instead of the LLM
    UNAVAILABLE = "unavailable"  # Breaker denied the call or the call failed
    REJECTED = "rejected"  # Every attempt failed validation


@dataclass
class GenerationOutcome:
    """Result of ValidatedGenerator.generate().

    Attributes:
        status: Final status.
        attempts: LLM attempts made (fallback answers count as one).
        data: Parsed payload when accepted, the fallback payload when degraded.
        validation: Validation of the last LLM response, if any.
        error: Human-readable reason when not accepted.
        circuit_state: Breaker state after the last call.
        history: Validation results of every attempt, in order.
    """

    status: GenerationStatus
    attempts: int
    circuit_state: CircuitState
    data: Any = None
    validation: ValidationResult | None = None
    error: str | None = None
    history: list[ValidationResult] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.status == GenerationStatus.ACCEPTED


class ValidatedGenerator:
    """Runs LLM prompts through a circuit breaker and a response validator.

    Usage:
        generator = ValidatedGenerator(client, registry)
        outcome = await generator.generate(
            prompt, ValidationTask.GAP_EXTRACTION, paper_content=paper_text
        )
        if outcome.accepted:
            gaps = outcome.data

    Attributes:
        client: LLM client used for generation.
        service_name: Name of the breaker guarding the client.
        max_attempts: Maximum LLM calls per generate() when validation fails.
    """

    def __init__(
        self,
        client: LLMClient,
        registry: CircuitBreakerRegistry | None = None,
        *,
        service_name: str = "gemini-api",
        max_attempts: int = 2,
        validator_config: ValidatorConfig | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            client: LLM client used for generation.
            registry: Breaker registry. Uses the process-wide registry if None.
            service_name: Breaker name for the LLM service.
            max_attempts: Maximum LLM calls when responses fail validation.
            validator_config: Validator configuration for every response.

        Raises:
            ValueError: If max_attempts is less than 1.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.client = client
        self.service_name = service_name
        self.max_attempts = max_attempts
        self._registry = registry
        self._validator_config = validator_config

    @property
    def registry(self) -> CircuitBreakerRegistry:
        return self._registry if self._registry is not None else get_registry()

    async def generate(
        self,
        prompt: str,
        task: ValidationTask | str,
        *,
        paper_content: str | None = None,
        max_gaps: int | None = None,
        operation: str | None = None,
    ) -> GenerationOutcome:
        """Generate and validate a response for a task.

        Args:
            prompt: Prompt sent to the LLM.
            task: Response contract used for validation.
            paper_content: Source paper text for the hallucination check.
            max_gaps: Gap limit for gap extraction.
            operation: Operation name reported to fallbacks. Defaults to the task name.

        Returns:
            GenerationOutcome describing the final result.
        """
        task = ValidationTask(task)
        breaker = self.registry.get_breaker(self.service_name)
        history: list[ValidationResult] = []

        for attempt in range(1, self.max_attempts + 1):
            result = await breaker.execute(
                lambda: self.client.send_message(prompt),
                operation_name=operation or task.value,
                metadata={"attempt": attempt, "model": getattr(self.client, "model", None)},
            )

            if not result.success:
                logger.warning(
                    "%s generation unavailable (%s): %s",
                    task.value,
                    result.failure.value if result.failure else "unknown",
                    result.error,
                )
                return GenerationOutcome(
                    status=GenerationStatus.UNAVAILABLE,
                    attempts=attempt,
                    circuit_state=result.circuit_state,
                    validation=history[-1] if history else None,
                    error=result.error,
                    history=history,
                )

            if result.from_cache:
                logger.info("%s generation served by %s fallback", task.value, self.service_name)
                return GenerationOutcome(
                    status=GenerationStatus.DEGRADED,
                    attempts=attempt,
                    circuit_state=result.circuit_state,
                    data=result.data,
                    validation=history[-1] if history else None,
                    history=history,
                )

            validation = validate_response(
                task,
                result.data if isinstance(result.data, str) else str(result.data),
                paper_content=paper_content,
                max_gaps=max_gaps,
                config=self._validator_config,
            )
            history.append(validation)

            if validation.is_valid:
                return GenerationOutcome(
                    status=GenerationStatus.ACCEPTED,
                    attempts=attempt,
                    circuit_state=result.circuit_state,
                    data=validation.payload,
                    validation=validation,
                    history=history,
                )

            logger.info(
                "%s response rejected on attempt %d/%d (score=%.2f, issues=%d)",
                task.value,
                attempt,
                self.max_attempts,
                validation.score,
                len(validation.issues),
            )

        return GenerationOutcome(
            status=GenerationStatus.REJECTED,
            attempts=self.max_attempts,
            circuit_state=breaker.state,
            validation=history[-1],
            error=REJECTED_MESSAGE,
            history=history,
        )
