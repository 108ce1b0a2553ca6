"""Response validation endpoints.

Endpoints:
- POST /validate/gaps - Validate a gap-extraction response
- POST /validate/proposal - Validate a research-proposal response
- POST /validate/red-team - Validate a red-team analysis response
- POST /validate/toxicity - Scan text for sensitive topics

Validation endpoints always answer 200; an invalid response is reported
through is_valid and the issue list.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from gapminer.api.dependencies import get_settings_dep
from gapminer.api.models import (
    GapValidationRequest,
    ResponseValidationRequest,
    ToxicityRequest,
    ToxicityResponse,
    ValidationResponse,
)
from gapminer.settings import GapMinerSettings
from gapminer.validation import (
    detect_toxicity,
    validate_gap_extraction,
    validate_red_team_analysis,
    validate_research_proposal,
)

router = APIRouter()


@router.post("/gaps", response_model=ValidationResponse)
def validate_gaps(
    body: GapValidationRequest,
    settings: GapMinerSettings = Depends(get_settings_dep),
) -> ValidationResponse:
    """Validate a gap-extraction response."""
    result = validate_gap_extraction(
        body.response,
        paper_content=body.paper_content,
        max_gaps=body.max_gaps,
        config=settings.validator,
    )
    return ValidationResponse.from_result(result)


@router.post("/proposal", response_model=ValidationResponse)
def validate_proposal(
    body: ResponseValidationRequest,
    settings: GapMinerSettings = Depends(get_settings_dep),
) -> ValidationResponse:
    """Validate a research-proposal response."""
    return ValidationResponse.from_result(
        validate_research_proposal(body.response, config=settings.validator)
    )


@router.post("/red-team", response_model=ValidationResponse)
def validate_red_team(
    body: ResponseValidationRequest,
    settings: GapMinerSettings = Depends(get_settings_dep),
) -> ValidationResponse:
    """Validate a red-team analysis response."""
    return ValidationResponse.from_result(
        validate_red_team_analysis(body.response, config=settings.validator)
    )


@router.post("/toxicity", response_model=ToxicityResponse)
def scan_toxicity(body: ToxicityRequest) -> ToxicityResponse:
    """Scan text for sensitive-topic patterns."""
    return ToxicityResponse.from_result(detect_toxicity(body.text))
