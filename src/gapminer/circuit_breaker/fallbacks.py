"""Predefined fallbacks for the services GapMiner depends on.

Each fallback returns a degraded payload tagged ``"type": "fallback_response"``
so callers can render a "temporarily unavailable" state instead of an error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .models import CircuitContext, FallbackHandler

if TYPE_CHECKING:
    from .registry import CircuitBreakerRegistry

logger = logging.getLogger(__name__)


def _base_payload(service: str, error: BaseException, context: CircuitContext) -> dict[str, Any]:
    return {
        "type": "fallback_response",
        "service": service,
        "error": str(error) or type(error).__name__,
        "context": context.to_dict(),
    }


async def gemini_fallback(error: BaseException, context: CircuitContext) -> dict[str, Any]:
    """Fallback for the LLM endpoint: a user-facing unavailability message."""
    logger.warning("Gemini API failed: %s. Using fallback response.", error)
    payload = _base_payload("gemini-api", error, context)
    payload["message"] = "The AI service is temporarily unavailable. Please try again later."
    return payload


async def firecrawl_fallback(error: BaseException, context: CircuitContext) -> dict[str, Any]:
    """Fallback for the crawler: no content and no gaps."""
    logger.warning("Firecrawl API failed: %s.", error)
    payload = _base_payload("firecrawl-api", error, context)
    payload["content"] = None
    payload["gaps"] = []
    return payload


async def firestore_fallback(error: BaseException, context: CircuitContext) -> dict[str, Any]:
    """Fallback for the document store: an empty result set."""
    logger.warning("Firestore failed: %s.", error)
    payload = _base_payload("firestore", error, context)
    payload["data"] = []
    return payload


DEFAULT_FALLBACKS: dict[str, FallbackHandler] = {
    "gemini-api": gemini_fallback,
    "firecrawl-api": firecrawl_fallback,
    "firestore": firestore_fallback,
}


def install_default_fallbacks(registry: CircuitBreakerRegistry) -> int:
    """Register the predefined fallbacks on the registry's breakers.

    Creates the breakers if they do not exist yet.

    Returns:
        Number of fallbacks installed.
    """
    for service_name, handler in DEFAULT_FALLBACKS.items():
        registry.get_breaker(service_name).set_fallback(handler)
    return len(DEFAULT_FALLBACKS)
