"""Validators for LLM responses.

Each validator parses a raw response for one task, checks it against the
task's schema, applies task-specific quality heuristics, and returns a
ValidationResult with a deductive score. Validators never raise: every
failure becomes an issue plus a score penalty, because they run right after
an unreliable upstream call and must not become a second failure source.

Public API:
    - validate_gap_extraction: Gap arrays extracted from a paper
    - validate_research_proposal: Proposal objects
    - validate_red_team_analysis: Failure mode / mitigation arrays
    - validate_response: Dispatch on ValidationTask
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable

from pydantic import TypeAdapter, ValidationError

from .config import DEFAULT_VALIDATOR_CONFIG, ValidatorConfig
from .extraction import PayloadShape, estimate_tokens, parse_payload
from .hallucination import check_grounding
from .models import (
    IssueCollector,
    IssueType,
    Severity,
    ValidationMetadata,
    ValidationResult,
    ValidationTask,
)
from .schemas import (
    GAP_LIST_ADAPTER,
    PROPOSAL_ADAPTER,
    RED_TEAM_LIST_ADAPTER,
    describe_errors,
)

logger = logging.getLogger(__name__)

SCHEMA_PENALTY = 0.25

_TENTATIVE = re.compile(r"might|could", re.IGNORECASE)

Checks = Callable[[Any, IssueCollector], None]


def validate_gap_extraction(
    response: str,
    *,
    paper_content: str | None = None,
    max_gaps: int | None = None,
    config: ValidatorConfig | None = None,
) -> ValidationResult:
    """Validate a gap-extraction response.

    Args:
        response: Raw LLM output expected to contain a JSON array of gaps.
        paper_content: Source paper text. Enables the hallucination check.
        max_gaps: Gap count above which extraction is flagged as excessive.
        config: Validator configuration. Uses DEFAULT_VALIDATOR_CONFIG if None.

    Returns:
        ValidationResult for the response.
    """
    cfg = config or DEFAULT_VALIDATOR_CONFIG
    limit = max_gaps if max_gaps is not None and max_gaps > 0 else cfg.default_max_gaps

    def checks(gaps: list[Any], collector: IssueCollector) -> None:
        _check_gap_heuristics(gaps, collector, limit)
        if paper_content:
            _check_hallucinations(gaps, paper_content, collector, cfg)

    return _run_validation(
        ValidationTask.GAP_EXTRACTION, response, cfg, "array", GAP_LIST_ADAPTER, checks
    )


def validate_research_proposal(
    response: str,
    *,
    config: ValidatorConfig | None = None,
) -> ValidationResult:
    """Validate a research-proposal response (a JSON object)."""
    cfg = config or DEFAULT_VALIDATOR_CONFIG
    return _run_validation(
        ValidationTask.RESEARCH_PROPOSAL,
        response,
        cfg,
        "object",
        PROPOSAL_ADAPTER,
        _check_proposal_heuristics,
    )


def validate_red_team_analysis(
    response: str,
    *,
    config: ValidatorConfig | None = None,
) -> ValidationResult:
    """Validate a red-team analysis response (a JSON array of failure modes)."""
    cfg = config or DEFAULT_VALIDATOR_CONFIG
    return _run_validation(
        ValidationTask.RED_TEAM,
        response,
        cfg,
        "array",
        RED_TEAM_LIST_ADAPTER,
        _check_red_team_heuristics,
    )


def validate_response(
    task: ValidationTask | str,
    response: str,
    *,
    paper_content: str | None = None,
    max_gaps: int | None = None,
    config: ValidatorConfig | None = None,
) -> ValidationResult:
    """Validate a response for the given task.

    paper_content and max_gaps only apply to gap extraction.

    Raises:
        ValueError: If task is not a known ValidationTask.
    """
    task = ValidationTask(task)
    if task == ValidationTask.GAP_EXTRACTION:
        return validate_gap_extraction(
            response, paper_content=paper_content, max_gaps=max_gaps, config=config
        )
    if task == ValidationTask.RESEARCH_PROPOSAL:
        return validate_research_proposal(response, config=config)
    return validate_red_team_analysis(response, config=config)


def _run_validation(
    task: ValidationTask,
    response: str,
    config: ValidatorConfig,
    expected: PayloadShape,
    adapter: TypeAdapter[Any],
    checks: Checks,
) -> ValidationResult:
    """Shared parse -> schema -> heuristics flow."""
    started = time.perf_counter()
    text = "" if response is None else str(response)
    collector = IssueCollector()
    payload: Any = None
    parsed: Any = None
    short_circuited = False

    try:
        outcome = parse_payload(text, expected)
        if outcome.issue is not None:
            collector.issues.append(outcome.issue)
            if outcome.zero_score:
                collector.score = 0.0
            else:
                collector.score -= outcome.penalty
            short_circuited = True
        else:
            payload = outcome.payload
            parsed = _check_schema(adapter, payload, collector)
            checks(payload, collector)
    except Exception as e:
        logger.exception("Unexpected error validating %s response", task.value)
        collector.add(
            IssueType.FORMAT_ERROR,
            Severity.CRITICAL,
            f"Failed to validate response: {e}",
        )
        collector.score = 0.0
        short_circuited = True

    score = max(0.0, min(1.0, collector.score))
    is_valid = not short_circuited and score > config.validity_threshold
    metadata = ValidationMetadata(
        response_length=len(text),
        token_count=estimate_tokens(text),
        processing_time_ms=(time.perf_counter() - started) * 1000,
        model=config.model,
        version=config.version,
    )

    logger.debug(
        "Validated %s response: valid=%s score=%.2f issues=%d",
        task.value,
        is_valid,
        score,
        len(collector.issues),
    )
    return ValidationResult(
        is_valid=is_valid,
        score=score,
        issues=collector.issues,
        metadata=metadata,
        payload=payload,
        parsed=parsed,
    )


def _check_schema(adapter: TypeAdapter[Any], payload: Any, collector: IssueCollector) -> Any:
    """Validate the payload against the task schema; non-fatal on failure."""
    try:
        return adapter.validate_python(payload)
    except ValidationError as e:
        collector.add(
            IssueType.FORMAT_ERROR,
            Severity.HIGH,
            f"Schema validation failed: {describe_errors(e)}",
            deduction=SCHEMA_PENALTY,
        )
        return None


def _check_gap_heuristics(gaps: list[Any], collector: IssueCollector, max_gaps: int) -> None:
    if len(gaps) > max_gaps:
        collector.add(
            IssueType.LOW_CONFIDENCE,
            Severity.LOW,
            f"Too many gaps identified ({len(gaps)}). This may indicate over-extraction.",
            deduction=0.05,
        )
    if not gaps:
        collector.add(
            IssueType.LOW_CONFIDENCE,
            Severity.MEDIUM,
            "No gaps were identified in the response",
            deduction=0.2,
        )

    for number, gap in enumerate(gaps, start=1):
        if not isinstance(gap, dict):
            continue

        confidence = gap.get("confidence")
        if _is_number(confidence) and confidence > 0.95:
            collector.add(
                IssueType.LOW_CONFIDENCE,
                Severity.LOW,
                f"Gap {number}: Very high confidence ({confidence}) may indicate overconfidence",
                deduction=0.02,
                suggestion="Consider if this confidence level is justified",
            )

        assumptions = gap.get("assumptions")
        if isinstance(assumptions, list) and len(assumptions) > 5:
            collector.add(
                IssueType.LOW_CONFIDENCE,
                Severity.LOW,
                f"Gap {number}: Many assumptions listed ({len(assumptions)}). "
                "This is acceptable but ensure quality.",
            )

        failures = gap.get("failures")
        if gap.get("type") == "methodology" and isinstance(failures, list) and not failures:
            collector.add(
                IssueType.LOW_CONFIDENCE,
                Severity.LOW,
                f"Gap {number}: Methodology gap with no failed approaches listed. "
                "Consider if prior attempts were considered.",
            )


def _check_hallucinations(
    gaps: list[Any],
    paper_content: str,
    collector: IssueCollector,
    config: ValidatorConfig,
) -> None:
    report = check_grounding(
        gaps,
        paper_content,
        key_term_limit=config.key_term_limit,
        key_term_min_length=config.key_term_min_length,
    )
    if report.ratio < config.hallucination_threshold:
        collector.add(
            IssueType.HALLUCINATION,
            Severity.MEDIUM,
            "Some gaps may reference content not present in the paper "
            f"({report.matched_claims}/{report.total_claims} claims grounded)",
            deduction=1.0 - report.ratio,
        )


def _check_proposal_heuristics(proposal: dict[str, Any], collector: IssueCollector) -> None:
    abstract = proposal.get("abstract")
    if isinstance(abstract, str) and len(abstract) > 800:
        collector.add(
            IssueType.LOW_CONFIDENCE,
            Severity.LOW,
            "Abstract is very long. Consider summarizing more concisely.",
            deduction=0.05,
        )

    motivation = proposal.get("motivation")
    if isinstance(motivation, str) and motivation and "why" not in motivation.lower():
        collector.add(
            IssueType.INCONSISTENCY,
            Severity.MEDIUM,
            'Motivation section does not clearly explain "why" this problem matters',
            deduction=0.1,
            suggestion="Add clearer justification for why this research is important",
        )

    methodology = proposal.get("methodology")
    if isinstance(methodology, str) and methodology and "step" not in methodology.lower():
        collector.add(
            IssueType.INCONSISTENCY,
            Severity.LOW,
            "Methodology section does not clearly outline steps",
            deduction=0.05,
            suggestion="Break down the methodology into clear numbered steps",
        )


def _check_red_team_heuristics(analysis: list[Any], collector: IssueCollector) -> None:
    if len(analysis) < 3:
        collector.add(
            IssueType.LOW_CONFIDENCE,
            Severity.MEDIUM,
            "Less than 3 failure modes identified. Red Team analysis should be thorough.",
            deduction=0.15,
        )

    for number, item in enumerate(analysis, start=1):
        if not isinstance(item, dict):
            continue
        failure_mode = item.get("failure_mode")
        mitigation = item.get("mitigation")
        if not isinstance(failure_mode, str):
            continue

        if isinstance(mitigation, str) and mitigation and len(mitigation) < len(failure_mode):
            collector.add(
                IssueType.INCONSISTENCY,
                Severity.LOW,
                f"Failure mode {number}: Mitigation is shorter than the failure description. "
                "Ensure mitigation addresses the full failure.",
                deduction=0.05,
            )

        if _TENTATIVE.search(failure_mode):
            collector.add(
                IssueType.LOW_CONFIDENCE,
                Severity.LOW,
                f"Failure mode {number}: Language is tentative. "
                "Consider making failure modes more definitive.",
                deduction=0.03,
            )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
