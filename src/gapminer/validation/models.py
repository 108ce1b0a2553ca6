"""Validation result types.

ValidationResult and ValidationIssue are value objects created per call.
Issues are only ever appended and the score only ever decreases while a
response is being validated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IssueType(str, Enum):
    """Category of a validation issue."""

    HALLUCINATION = "hallucination"
    INCONSISTENCY = "inconsistency"
    FORMAT_ERROR = "format_error"
    LOW_CONFIDENCE = "low_confidence"
    TOXICITY = "toxicity"
    OUT_OF_SCOPE = "out_of_scope"


class Severity(str, Enum):
    """Severity of a validation issue."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ValidationTask(str, Enum):
    """Response contracts the validators know about."""

    GAP_EXTRACTION = "gap_extraction"
    RESEARCH_PROPOSAL = "research_proposal"
    RED_TEAM = "red_team"


@dataclass(frozen=True)
class TextSpan:
    """Character offsets into the validated response."""

    start: int
    end: int


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found in an LLM response."""

    type: IssueType
    severity: Severity
    message: str
    location: TextSpan | None = None
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.location is not None:
            data["location"] = {"start": self.location.start, "end": self.location.end}
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


@dataclass(frozen=True)
class ValidationMetadata:
    """Bookkeeping recorded for every validated response."""

    response_length: int
    token_count: int
    processing_time_ms: float
    model: str
    version: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "response_length": self.response_length,
            "token_count": self.token_count,
            "processing_time_ms": self.processing_time_ms,
            "model": self.model,
            "version": self.version,
        }


@dataclass
class ValidationResult:
    """Outcome of validating one LLM response.

    Attributes:
        is_valid: True when the score exceeds the threshold and parsing succeeded.
        score: Quality score clamped to [0, 1].
        issues: Problems found, in the order they were detected.
        metadata: Response bookkeeping.
        payload: Parsed JSON payload, None when parsing failed.
        parsed: Schema-validated models, None when the schema check failed.
    """

    is_valid: bool
    score: float
    issues: list[ValidationIssue]
    metadata: ValidationMetadata
    payload: Any = None
    parsed: Any = None

    @property
    def has_blocking_issues(self) -> bool:
        """Check for high or critical issues."""
        return any(i.severity in (Severity.HIGH, Severity.CRITICAL) for i in self.issues)

    def issues_of(self, issue_type: IssueType) -> list[ValidationIssue]:
        """Return the issues of one type."""
        return [i for i in self.issues if i.type == issue_type]

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "score": self.score,
            "issues": [i.to_dict() for i in self.issues],
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class IssueCollector:
    """Accumulates issues and score deductions while validating one response."""

    score: float = 1.0
    issues: list[ValidationIssue] = field(default_factory=list)

    def add(
        self,
        issue_type: IssueType,
        severity: Severity,
        message: str,
        *,
        deduction: float = 0.0,
        suggestion: str | None = None,
        location: TextSpan | None = None,
    ) -> None:
        """Record an issue and deduct from the score."""
        self.issues.append(
            ValidationIssue(
                type=issue_type,
                severity=severity,
                message=message,
                location=location,
                suggestion=suggestion,
            )
        )
        self.score -= deduction
