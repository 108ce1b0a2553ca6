"""Pydantic schemas for the LLM response contracts.

Strict models: types are not coerced, so ``"0.9"`` is not a confidence and
``123`` is not a problem statement. Unknown fields are ignored.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

GapType = Literal["data", "compute", "evaluation", "theory", "deployment", "methodology"]
Level = Literal["low", "medium", "high"]


class GapResponse(BaseModel):
    """One research gap extracted from a paper."""

    model_config = ConfigDict(strict=True, populate_by_name=True)

    problem: str = Field(min_length=10, max_length=2000)
    type: GapType
    confidence: float = Field(ge=0, le=1)
    impact_score: Level | None = Field(default=None, alias="impactScore")
    difficulty: Level | None = None
    assumptions: list[str] | None = None
    failures: list[str] | None = None
    dataset_gaps: list[str] | None = Field(default=None, alias="datasetGaps")
    evaluation_critique: str | None = Field(default=None, alias="evaluationCritique")


class ResearchProposal(BaseModel):
    """A drafted research proposal."""

    model_config = ConfigDict(strict=True)

    title: str = Field(min_length=10, max_length=200)
    abstract: str = Field(min_length=50, max_length=1000)
    motivation: str = Field(min_length=20, max_length=2000)
    methodology: str = Field(min_length=20, max_length=2000)


class RedTeamItem(BaseModel):
    """One failure mode from a red-team analysis and its mitigation."""

    model_config = ConfigDict(strict=True)

    failure_mode: str = Field(min_length=10)
    mitigation: str = Field(min_length=10)


GAP_LIST_ADAPTER: TypeAdapter[list[GapResponse]] = TypeAdapter(list[GapResponse])
RED_TEAM_LIST_ADAPTER: TypeAdapter[list[RedTeamItem]] = TypeAdapter(list[RedTeamItem])
PROPOSAL_ADAPTER: TypeAdapter[ResearchProposal] = TypeAdapter(ResearchProposal)


def describe_errors(error: ValidationError, limit: int = 5) -> str:
    """Summarize pydantic errors as ``location: message`` pairs."""
    parts: list[str] = []
    for detail in error.errors()[:limit]:
        location = ".".join(str(p) for p in detail["loc"]) or "<root>"
        parts.append(f"{location}: {detail['msg']}")
    remaining = error.error_count() - limit
    if remaining > 0:
        parts.append(f"... and {remaining} more")
    return ", ".join(parts)
