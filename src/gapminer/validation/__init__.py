"""LLM response validation for GapMiner.

Parses raw LLM output for gap extraction, research proposals and red-team
analyses, scores it deductively, and reports the issues found.
"""

from .config import DEFAULT_VALIDATOR_CONFIG, ValidatorConfig
from .extraction import ParseOutcome, estimate_tokens, extract_json_payload, parse_payload
from .hallucination import GroundingReport, check_grounding, extract_key_terms
from .models import (
    IssueType,
    Severity,
    TextSpan,
    ValidationIssue,
    ValidationMetadata,
    ValidationResult,
    ValidationTask,
)
from .schemas import GapResponse, RedTeamItem, ResearchProposal
from .toxicity import ToxicityResult, detect_toxicity
from .validators import (
    validate_gap_extraction,
    validate_red_team_analysis,
    validate_research_proposal,
    validate_response,
)

__all__ = [
    "DEFAULT_VALIDATOR_CONFIG",
    "GapResponse",
    "GroundingReport",
    "IssueType",
    "ParseOutcome",
    "RedTeamItem",
    "ResearchProposal",
    "Severity",
    "TextSpan",
    "ToxicityResult",
    "ValidationIssue",
    "ValidationMetadata",
    "ValidationResult",
    "ValidationTask",
    "ValidatorConfig",
    "check_grounding",
    "detect_toxicity",
    "estimate_tokens",
    "extract_json_payload",
    "extract_key_terms",
    "parse_payload",
    "validate_gap_extraction",
    "validate_red_team_analysis",
    "validate_research_proposal",
    "validate_response",
]
