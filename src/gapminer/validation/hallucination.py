"""Hallucination check for extracted gaps.

Cross-references each claim in a gap extraction against the source paper.
A claim counts as grounded when it shares a key term with the paper or
quotes the paper's text. The check is lexical and cheap; it flags
extractions that drift away from the source rather than proving anything.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Any

_NON_WORD = re.compile(r"[^\w\s]")

PROBLEM_PREFIX_LENGTH = 50
FAILURE_PREFIX_LENGTH = 20


@dataclass(frozen=True)
class GroundingReport:
    """How many extracted claims could be tied back to the source.

    Attributes:
        total_claims: Problems and listed failures examined.
        matched_claims: Claims found to be grounded in the source.
    """

    total_claims: int
    matched_claims: int

    @property
    def ratio(self) -> float:
        """Grounded fraction of claims, 1.0 when there were no claims."""
        if self.total_claims == 0:
            return 1.0
        return self.matched_claims / self.total_claims


def extract_key_terms(content: str, limit: int = 50, min_length: int = 6) -> list[str]:
    """Return the most frequent long words of a text.

    Punctuation is stripped and words are lowercased. Ties keep the order
    in which words first appear.

    Args:
        content: Source text.
        limit: Maximum number of terms.
        min_length: Minimum word length.
    """
    words = _NON_WORD.sub("", content.lower()).split()
    frequency = Counter(w for w in words if len(w) >= min_length)
    return [word for word, _ in frequency.most_common(limit)]


def check_grounding(
    gaps: list[Any],
    paper_content: str,
    *,
    key_term_limit: int = 50,
    key_term_min_length: int = 6,
) -> GroundingReport:
    """Measure how many gap claims are grounded in the paper.

    Each gap's ``problem`` is grounded when it contains a key term of the
    paper or its first 50 characters appear verbatim in the paper. Each
    entry of ``failures`` is grounded when its first 20 characters appear in
    the paper, ignoring case. Malformed entries are skipped.
    """
    paper_lower = paper_content.lower()
    key_terms = extract_key_terms(
        paper_content, limit=key_term_limit, min_length=key_term_min_length
    )
    total = 0
    matched = 0

    for gap in gaps:
        if not isinstance(gap, dict):
            continue

        problem = gap.get("problem")
        if isinstance(problem, str):
            total += 1
            problem_lower = problem.lower()
            has_key_term = any(term in problem_lower for term in key_terms)
            if has_key_term or problem[:PROBLEM_PREFIX_LENGTH] in paper_content:
                matched += 1

        failures = gap.get("failures")
        if isinstance(failures, list):
            for failure in failures:
                if not isinstance(failure, str):
                    continue
                total += 1
                if failure.lower()[:FAILURE_PREFIX_LENGTH] in paper_lower:
                    matched += 1

    return GroundingReport(total_claims=total, matched_claims=matched)
