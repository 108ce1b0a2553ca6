"""Sensitive-topic scan for generated text.

A standalone signal for callers; it does not affect validation scores.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

ToxicitySeverity = Literal["low", "medium", "high"]

TOXIC_PATTERNS: dict[str, re.Pattern[str]] = {
    "hate_speech": re.compile(r"hate\s+(speech|crime|group)", re.IGNORECASE),
    "violence": re.compile(r"violence?", re.IGNORECASE),
    "terrorism": re.compile(r"terroris", re.IGNORECASE),
    "harassment": re.compile(r"harass", re.IGNORECASE),
    "discrimination": re.compile(r"discriminat", re.IGNORECASE),
}


@dataclass(frozen=True)
class ToxicityResult:
    """Outcome of a toxicity scan.

    Attributes:
        detected: True when any pattern matched.
        severity: "low" when nothing matched, "high" when more than two
            categories matched, "medium" otherwise.
        categories: Names of the matched categories.
    """

    detected: bool
    severity: ToxicitySeverity
    categories: tuple[str, ...] = field(default_factory=tuple)


def detect_toxicity(text: str) -> ToxicityResult:
    """Scan text for sensitive-topic patterns."""
    categories = tuple(name for name, pattern in TOXIC_PATTERNS.items() if pattern.search(text))
    if not categories:
        return ToxicityResult(detected=False, severity="low")
    severity: ToxicitySeverity = "high" if len(categories) > 2 else "medium"
    return ToxicityResult(detected=True, severity=severity, categories=categories)
