"""Tests for the sensitive-topic scan."""

from __future__ import annotations

from gapminer.validation import detect_toxicity


class TestDetectToxicity:
    def test_clean_text(self) -> None:
        result = detect_toxicity("We study scaling laws for language models.")
        assert result.detected is False
        assert result.severity == "low"
        assert result.categories == ()

    def test_single_category_is_medium(self) -> None:
        result = detect_toxicity("The dataset contains descriptions of violence.")
        assert result.detected is True
        assert result.severity == "medium"
        assert result.categories == ("violence",)

    def test_two_categories_stay_medium(self) -> None:
        result = detect_toxicity("Posts about harassment and discrimination were filtered.")
        assert result.severity == "medium"
        assert set(result.categories) == {"harassment", "discrimination"}

    def test_more_than_two_categories_is_high(self) -> None:
        result = detect_toxicity(
            "Moderation of hate speech, terrorism propaganda and incitement to violence."
        )
        assert result.severity == "high"
        assert set(result.categories) == {"hate_speech", "terrorism", "violence"}

    def test_case_insensitive(self) -> None:
        assert detect_toxicity("HARASSMENT REPORTS").categories == ("harassment",)
