"""Text completion client used by the classification agents.

Wraps a dspy LM so callers send a role-tagged message list and get back the
raw completion text. The response is never assumed to be JSON; parsing is the
caller's job.
"""

import logging
from typing import Any, Dict, List, Optional

import dspy

from taxxy.config import get_config
from taxxy.exceptions import CompletionError
from taxxy.llms.llm import get_llm_for_agent
from taxxy.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)


class CompletionClient:
    """Single-shot chat completion with bounded retries."""

    def __init__(
        self,
        lm: Optional[dspy.LM] = None,
        *,
        agent_name: str = "classification",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        """
        Initialize completion client

        Args:
            lm: dspy language model (if None, uses config for this agent)
            agent_name: Agent name used to pick the provider from config
            temperature: Sampling temperature (defaults to CLASSIFICATION_TEMPERATURE)
            max_tokens: Output token budget (defaults to CLASSIFICATION_MAX_TOKENS)
            timeout: Request timeout in seconds (defaults to CLASSIFICATION_TIMEOUT)
            max_retries: Retries after the first failed attempt
            retry_delay: Initial backoff delay in seconds
        """
        settings = get_config().classification

        if lm is None:
            lm = get_llm_for_agent(agent_name)

        self.lm = lm
        self.temperature = settings.temperature if temperature is None else temperature
        self.max_tokens = settings.max_tokens if max_tokens is None else max_tokens
        self.timeout = settings.timeout if timeout is None else timeout
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.retry_delay = settings.retry_delay if retry_delay is None else retry_delay

    def _call_lm(self, messages: List[Dict[str, str]]) -> str:
        outputs = self.lm(
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
        )
        if not outputs:
            raise CompletionError("Completion API returned no choices")

        first: Any = outputs[0]
        # dspy returns dicts instead of strings when extra fields (logprobs, tool calls) are present
        if isinstance(first, dict):
            first = first.get("text") or ""

        text = str(first or "").strip()
        if not text:
            raise CompletionError("Completion API returned empty content")
        return text

    def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Send messages to the model and return the completion text.

        Args:
            messages: Role-tagged messages, e.g. [{"role": "user", "content": "..."}]

        Returns:
            Raw completion text

        Raises:
            Exception: Whatever the provider raised on the final attempt, or
                CompletionError when the response was empty
        """
        call = retry_with_backoff(
            max_retries=self.max_retries,
            initial_delay=self.retry_delay,
        )(self._call_lm)
        return call(messages)

    def complete_prompt(self, prompt: str) -> str:
        """Convenience wrapper sending a single user message."""
        return self.complete([{"role": "user", "content": prompt}])
