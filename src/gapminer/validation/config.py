"""Configuration for LLM response validation.

Thresholds and limits used by the task validators and the hallucination
check, plus the model identifiers recorded in result metadata.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidatorConfig:
    """Configuration for LLM response validators.

    Attributes:
        validity_threshold: A response is valid only when its score exceeds this.
        default_max_gaps: Gap count above which extraction is flagged as excessive.
        hallucination_threshold: Grounding ratio below which claims are flagged.
        key_term_limit: Number of most frequent source words used as key terms.
        key_term_min_length: Minimum length of a key term.
        model: Model identifier recorded in result metadata.
        version: Validator version recorded in result metadata.
    """

    validity_threshold: float = 0.7
    default_max_gaps: int = 20
    hallucination_threshold: float = 0.8
    key_term_limit: int = 50
    key_term_min_length: int = 6
    model: str = "gemini-2.0-flash"
    version: str = "1.0.0"

    def __post_init__(self) -> None:
        if not 0.0 <= self.validity_threshold <= 1.0:
            raise ValueError(
                f"validity_threshold must be within [0, 1], got {self.validity_threshold}"
            )
        if not 0.0 <= self.hallucination_threshold <= 1.0:
            raise ValueError(
                "hallucination_threshold must be within [0, 1], "
                f"got {self.hallucination_threshold}"
            )
        if self.default_max_gaps < 1:
            raise ValueError(f"default_max_gaps must be >= 1, got {self.default_max_gaps}")
        if self.key_term_limit < 1:
            raise ValueError(f"key_term_limit must be >= 1, got {self.key_term_limit}")
        if self.key_term_min_length < 1:
            raise ValueError(
                f"key_term_min_length must be >= 1, got {self.key_term_min_length}"
            )


# Default configuration instance for convenience
DEFAULT_VALIDATOR_CONFIG = ValidatorConfig()
