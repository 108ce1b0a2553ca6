"""Tests for key-term extraction and claim grounding."""

from __future__ import annotations

import pytest

from gapminer.validation import GroundingReport, check_grounding, extract_key_terms


class TestExtractKeyTerms:
    def test_orders_by_frequency(self) -> None:
        content = "Transformer transformer scaling, scaling scaling models."
        assert extract_key_terms(content) == ["scaling", "transformer", "models"]

    def test_ignores_short_words(self) -> None:
        assert extract_key_terms("the cat sat on a mat with a plan") == []

    def test_respects_limit_and_min_length(self) -> None:
        content = "alpha alpha bravo charlie charlie charlie"
        assert extract_key_terms(content, limit=1, min_length=5) == ["charlie"]

    def test_ties_keep_first_seen_order(self) -> None:
        assert extract_key_terms("dataset compute dataset compute") == ["dataset", "compute"]


class TestCheckGrounding:
    PAPER = "This paper studies transformer scaling laws across benchmark suites."

    def test_no_claims_is_fully_grounded(self) -> None:
        report = check_grounding([], self.PAPER)
        assert report == GroundingReport(total_claims=0, matched_claims=0)
        assert report.ratio == 1.0

    def test_problem_with_key_term_is_grounded(self) -> None:
        report = check_grounding([{"problem": "Scaling is unmeasured"}], self.PAPER)
        assert report.matched_claims == 1

    def test_problem_quoting_paper_is_grounded(self) -> None:
        paper = "Our method ignores low-resource languages entirely."
        report = check_grounding(
            [{"problem": "Our method ignores low-resource languages entirely."}],
            paper,
            key_term_min_length=30,
        )
        assert report.ratio == 1.0

    def test_failures_count_as_claims(self) -> None:
        gaps = [
            {
                "problem": "Transformer depth is fixed",
                "failures": ["SCALING LAWS ACROSS benchmarks", "Unrelated robotics attempt"],
            }
        ]
        report = check_grounding(gaps, self.PAPER)
        assert report.total_claims == 3
        assert report.matched_claims == 2
        assert report.ratio == pytest.approx(2 / 3)

    def test_malformed_entries_are_skipped(self) -> None:
        gaps = ["not a gap", {"problem": 42}, {"failures": [None, "scaling laws across"]}]
        report = check_grounding(gaps, self.PAPER)
        assert report.total_claims == 1
        assert report.matched_claims == 1
