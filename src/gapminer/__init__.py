"""GapMiner resilience core.

Validates LLM responses for research-gap analysis and guards every external
service call with a per-service circuit breaker.
"""

from gapminer.circuit_breaker import (
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    CircuitBreakerResult,
    CircuitState,
    ServiceCircuitBreaker,
    get_registry,
    reset_registry,
)
from gapminer.generation import GenerationOutcome, GenerationStatus, ValidatedGenerator
from gapminer.llm_client import LLMClient, LLMClientError, MockLLMClient
from gapminer.settings import GapMinerSettings, SettingsError, load_settings
from gapminer.validation import (
    ValidationIssue,
    ValidationResult,
    ValidationTask,
    ValidatorConfig,
    detect_toxicity,
    validate_gap_extraction,
    validate_red_team_analysis,
    validate_research_proposal,
    validate_response,
)

__version__ = "1.0.0"

__all__ = [
    "CircuitBreakerConfig",
    "CircuitBreakerRegistry",
    "CircuitBreakerResult",
    "CircuitState",
    "GapMinerSettings",
    "GenerationOutcome",
    "GenerationStatus",
    "LLMClient",
    "LLMClientError",
    "MockLLMClient",
    "ServiceCircuitBreaker",
    "SettingsError",
    "ValidatedGenerator",
    "ValidationIssue",
    "ValidationResult",
    "ValidationTask",
    "ValidatorConfig",
    "detect_toxicity",
    "get_registry",
    "load_settings",
    "reset_registry",
    "validate_gap_extraction",
    "validate_red_team_analysis",
    "validate_research_proposal",
    "validate_response",
]
