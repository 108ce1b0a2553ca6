"""API request and response models with Pydantic validation."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from gapminer.circuit_breaker import CircuitBreakerMetrics
from gapminer.validation import ToxicityResult, ValidationResult


class ResponseValidationRequest(BaseModel):
    """Request model for validating a raw LLM response."""

    model_config = {"extra": "forbid"}

    response: str


class GapValidationRequest(ResponseValidationRequest):
    """Request model for validating a gap-extraction response."""

    paper_content: str | None = None
    max_gaps: int | None = Field(default=None, ge=1)


class ToxicityRequest(BaseModel):
    """Request model for a sensitive-topic scan."""

    model_config = {"extra": "forbid"}

    text: str

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Validate text is not empty or whitespace."""
        if not v or not v.strip():
            raise ValueError("text must not be empty or whitespace")
        return v


class IssueResponse(BaseModel):
    """A single validation issue."""

    type: str
    severity: Literal["low", "medium", "high", "critical"]
    message: str
    location: dict[str, int] | None = None
    suggestion: str | None = None


class ValidationMetadataResponse(BaseModel):
    """Bookkeeping recorded for a validated response."""

    response_length: int
    token_count: int
    processing_time_ms: float
    model: str
    version: str


class ValidationResponse(BaseModel):
    """Response model for validation endpoints."""

    is_valid: bool
    score: float = Field(ge=0.0, le=1.0)
    issues: list[IssueResponse]
    metadata: ValidationMetadataResponse

    @classmethod
    def from_result(cls, result: ValidationResult) -> ValidationResponse:
        return cls.model_validate(result.to_dict())


class ToxicityResponse(BaseModel):
    """Response model for the toxicity endpoint."""

    detected: bool
    severity: Literal["low", "medium", "high"]
    categories: list[str]

    @classmethod
    def from_result(cls, result: ToxicityResult) -> ToxicityResponse:
        return cls(
            detected=result.detected,
            severity=result.severity,
            categories=list(result.categories),
        )


class CircuitResponse(BaseModel):
    """Metrics snapshot of one service circuit breaker."""

    service_name: str
    state: Literal["closed", "open", "half-open"]
    failure_count: int
    success_count: int
    total_requests: int
    last_failure_at: str | None = None
    last_success_at: str | None = None
    next_retry_at: str | None = None

    @classmethod
    def from_metrics(cls, metrics: CircuitBreakerMetrics) -> CircuitResponse:
        return cls.model_validate(metrics.to_dict())


class CircuitListResponse(BaseModel):
    """Response model for listing circuits."""

    circuits: list[CircuitResponse]
    total: int


class CircuitResetResponse(BaseModel):
    """Response model for resetting all circuits."""

    reset_count: int


class HealthResponse(BaseModel):
    """Response model for the health endpoint."""

    status: Literal["healthy", "degraded", "unhealthy"]
    circuits: list[CircuitResponse]
    open_services: list[str]
    timestamp: str
    details: dict[str, Any] | None = None
