"""Tests for gap-extraction response validation."""

from __future__ import annotations

import json
import math
from typing import Any

import pytest

from gapminer.validation import (
    GapResponse,
    IssueType,
    Severity,
    ValidatorConfig,
    validate_gap_extraction,
)


def _gap(**overrides: Any) -> dict[str, Any]:
    gap: dict[str, Any] = {
        "problem": "Scaling laws are not validated beyond ten billion parameters",
        "type": "evaluation",
        "confidence": 0.8,
        "impactScore": "high",
        "difficulty": "medium",
        "assumptions": ["Compute budgets stay fixed"],
        "failures": ["Extrapolation from small models"],
    }
    gap.update(overrides)
    return gap


def _response(*gaps: dict[str, Any]) -> str:
    return json.dumps(list(gaps))


VALID_RESPONSE = _response(
    _gap(),
    _gap(problem="No public dataset covers multilingual scientific abstracts", type="data"),
    _gap(problem="Inference cost on edge hardware is never measured", type="deployment"),
)


class TestWellFormedResponses:
    """Responses that satisfy the contract."""

    def test_valid_gap_array_scores_full_marks(self) -> None:
        result = validate_gap_extraction(VALID_RESPONSE)

        assert result.is_valid is True
        assert result.score == pytest.approx(1.0)
        assert result.issues == []
        assert not result.has_blocking_issues

    def test_parsed_models_use_python_names(self) -> None:
        result = validate_gap_extraction(VALID_RESPONSE)
        assert len(result.parsed) == 3
        assert isinstance(result.parsed[0], GapResponse)
        assert result.parsed[0].impact_score == "high"
        assert result.payload[0]["impactScore"] == "high"

    def test_commentary_around_payload_is_tolerated(self) -> None:
        text = f"Here is my analysis:\n```json\n{VALID_RESPONSE}\n```\nLet me know!"
        assert validate_gap_extraction(text).is_valid is True

    def test_metadata(self) -> None:
        result = validate_gap_extraction(VALID_RESPONSE)
        assert result.metadata.response_length == len(VALID_RESPONSE)
        assert result.metadata.token_count == math.ceil(len(VALID_RESPONSE) / 4)
        assert result.metadata.model == "gemini-2.0-flash"
        assert result.metadata.version == "1.0.0"
        assert result.metadata.processing_time_ms >= 0


class TestFormatErrors:
    """Parse and schema failures never raise."""

    def test_garbage_scores_zero_with_one_critical_issue(self) -> None:
        result = validate_gap_extraction("[this is {not} json]")

        assert result.is_valid is False
        assert result.score == 0.0
        assert len(result.issues) == 1
        assert result.issues[0].type == IssueType.FORMAT_ERROR
        assert result.issues[0].severity == Severity.CRITICAL

    def test_truncated_response_is_rejected(self) -> None:
        # Cut off mid-array: the nested assumptions list must not pass as the payload
        truncated = (
            '[{"problem": "Scaling laws are not validated beyond ten billion parameters", '
            '"type": "data", "confidence": 0.8, "assumptions": ["iid data", "fixed compute"]}, '
            '{"problem": "Evalu'
        )
        result = validate_gap_extraction(truncated)

        assert result.is_valid is False
        assert result.score == 0.0
        assert len(result.issues) == 1
        assert result.issues[0].severity == Severity.CRITICAL
        assert result.payload is None

    def test_deeply_unclosed_brackets(self) -> None:
        result = validate_gap_extraction("[" * 20000)

        assert result.is_valid is False
        assert result.score == 0.0
        assert result.issues[0].severity == Severity.CRITICAL

    def test_prose_without_json(self) -> None:
        result = validate_gap_extraction("I could not identify any gaps in this paper.")

        assert result.is_valid is False
        assert result.score == pytest.approx(0.7)
        assert result.issues[0].severity == Severity.HIGH
        assert result.issues[0].message == "No valid JSON array found in response"

    def test_none_response_does_not_raise(self) -> None:
        result = validate_gap_extraction(None)  # type: ignore[arg-type]
        assert result.is_valid is False
        assert result.metadata.response_length == 0

    def test_object_instead_of_array(self) -> None:
        result = validate_gap_extraction('{"problem": "not wrapped in an array"}')
        assert result.is_valid is False
        assert result.issues[0].message == "Response is not an array"
        assert result.score == pytest.approx(0.7)

    def test_schema_failure_is_non_fatal(self) -> None:
        """A too-short problem fails the schema but parsing still succeeds."""
        result = validate_gap_extraction('[{"problem":"short","type":"data","confidence":0.5}]')

        assert result.score == pytest.approx(0.75)
        assert result.is_valid is True
        assert result.parsed is None
        schema_issues = result.issues_of(IssueType.FORMAT_ERROR)
        assert len(schema_issues) == 1
        assert schema_issues[0].severity == Severity.HIGH
        assert "problem" in schema_issues[0].message
        assert not any(i.severity == Severity.CRITICAL for i in result.issues)

    def test_schema_is_strict_about_types(self) -> None:
        result = validate_gap_extraction(_response(_gap(confidence="0.9")))
        assert result.score == pytest.approx(0.75)
        assert "confidence" in result.issues[0].message

    def test_unknown_gap_type_fails_schema(self) -> None:
        result = validate_gap_extraction(_response(_gap(type="politics")))
        assert result.issues_of(IssueType.FORMAT_ERROR)


class TestGapHeuristics:
    """Quality heuristics on well-formed gaps."""

    def test_too_many_gaps(self) -> None:
        result = validate_gap_extraction(VALID_RESPONSE, max_gaps=2)
        assert result.score == pytest.approx(0.95)
        assert "Too many gaps identified (3)" in result.issues[0].message

    def test_default_max_gaps_from_config(self) -> None:
        config = ValidatorConfig(default_max_gaps=1)
        result = validate_gap_extraction(VALID_RESPONSE, config=config)
        assert result.score == pytest.approx(0.95)

    def test_no_gaps(self) -> None:
        result = validate_gap_extraction("[]")
        assert result.score == pytest.approx(0.8)
        assert result.is_valid is True
        assert result.issues[0].severity == Severity.MEDIUM
        assert result.issues[0].message == "No gaps were identified in the response"

    def test_overconfidence(self) -> None:
        result = validate_gap_extraction(_response(_gap(confidence=0.99)))
        assert result.score == pytest.approx(0.98)
        issue = result.issues[0]
        assert issue.type == IssueType.LOW_CONFIDENCE
        assert issue.message.startswith("Gap 1: Very high confidence (0.99)")
        assert issue.suggestion is not None

    def test_many_assumptions_is_informational(self) -> None:
        assumptions = [f"assumption {i}" for i in range(6)]
        result = validate_gap_extraction(_response(_gap(assumptions=assumptions)))
        assert result.score == pytest.approx(1.0)
        assert "Many assumptions listed (6)" in result.issues[0].message

    def test_methodology_gap_without_failures(self) -> None:
        result = validate_gap_extraction(_response(_gap(type="methodology", failures=[])))
        assert result.score == pytest.approx(1.0)
        assert "Methodology gap with no failed approaches" in result.issues[0].message

    def test_validity_threshold_is_exclusive(self) -> None:
        config = ValidatorConfig(validity_threshold=0.8)
        assert validate_gap_extraction("[]", config=config).is_valid is False


class TestHallucinationCheck:
    """Cross-referencing gap claims against the paper."""

    def test_ungrounded_claim_zeroes_score(self) -> None:
        paper = "This paper studies transformer scaling laws."
        response = _response(
            {
                "problem": "The dataset lacks diversity in robotics tasks",
                "type": "data",
                "confidence": 0.5,
            }
        )

        result = validate_gap_extraction(response, paper_content=paper)

        hallucinations = result.issues_of(IssueType.HALLUCINATION)
        assert len(hallucinations) == 1
        assert hallucinations[0].severity == Severity.MEDIUM
        assert result.score == 0.0
        assert result.is_valid is False

    def test_grounded_claims_pass(self) -> None:
        paper = (
            "We evaluate transformer scaling on benchmark suites. Extrapolation from "
            "small models has repeatedly failed for transformer scaling."
        )
        response = _response(
            _gap(
                problem="Transformer scaling is untested on multilingual benchmarks",
                failures=["Extrapolation from small models"],
            )
        )

        result = validate_gap_extraction(response, paper_content=paper)
        assert result.issues_of(IssueType.HALLUCINATION) == []
        assert result.score == pytest.approx(1.0)

    def test_check_skipped_without_paper(self) -> None:
        response = _response(_gap(problem="Something entirely unrelated to any paper"))
        assert validate_gap_extraction(response).score == pytest.approx(1.0)
