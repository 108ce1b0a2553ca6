"""LLM client abstraction for GapMiner.

The hosted text-completion endpoint is treated as an opaque service: it
takes a prompt and returns raw text. This module defines the protocol that
callers depend on plus a mock client for tests and local runs.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class LLMClient(Protocol):
    """Protocol for LLM clients.

    Allows swapping the production client for a mock in tests.
    """

    model: str

    async def send_message(self, prompt: str) -> str:
        """Send a prompt to the LLM and return the response text.

        Args:
            prompt: The formatted prompt to send to the LLM.

        Returns:
            The text response from the LLM.

        Raises:
            LLMClientError: If the call fails.
        """
        ...


class LLMClientError(Exception):
    """Base exception for LLM client errors."""

    pass


class BaseLLMClient(ABC):
    """Abstract base class for LLM clients.

    Subclasses must implement the _call_api method.
    """

    def __init__(self, model: str = "gemini-2.0-flash") -> None:
        """Initialize the LLM client.

        Args:
            model: The model identifier to use for API calls.
        """
        self.model = model

    @abstractmethod
    async def _call_api(self, prompt: str) -> str:
        """Make the actual API call.

        Args:
            prompt: The prompt to send.

        Returns:
            Raw response text from the API.
        """
        ...

    async def send_message(self, prompt: str) -> str:
        """Send a message and return the response.

        Args:
            prompt: The prompt to send to the LLM.

        Returns:
            The text response from the LLM.
        """
        return await self._call_api(prompt)


class MockLLMClient(BaseLLMClient):
    """Mock LLM client for testing.

    Returns predefined responses based on prompt content, or plays back a
    script of responses and exceptions in order.
    """

    def __init__(
        self,
        responses: dict[str, str] | None = None,
        default_response: str | None = None,
        script: list[str | BaseException] | None = None,
    ) -> None:
        """Initialize the mock client with predefined responses.

        Args:
            responses: Dict mapping prompt substrings to responses.
            default_response: Fallback response if no match found.
            script: Responses (or exceptions to raise) consumed one per call
                before keyed responses are consulted.
        """
        super().__init__(model="mock")
        self.responses = responses or {}
        self.default_response = default_response or "[]"
        self.script = list(script or [])
        self.call_history: list[str] = []

    async def _call_api(self, prompt: str) -> str:
        """Return a scripted or predefined response based on prompt content.

        Raises:
            BaseException: Whatever exception the script holds for this call.
        """
        self.call_history.append(prompt)

        if self.script:
            step = self.script.pop(0)
            if isinstance(step, BaseException):
                logger.debug("MockLLMClient raising scripted %s", type(step).__name__)
                raise step
            return step

        for key, response in self.responses.items():
            if key in prompt:
                logger.debug("MockLLMClient matched key: %s", key)
                return response

        logger.debug("MockLLMClient using default response")
        return self.default_response

    def get_call_count(self) -> int:
        """Return the number of API calls made."""
        return len(self.call_history)

    def reset(self) -> None:
        """Reset call history for fresh test runs."""
        self.call_history.clear()
