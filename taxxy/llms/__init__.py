"""LLM providers and the completion client."""

from taxxy.llms.completion import CompletionClient
from taxxy.llms.llm import get_llm_for_agent

__all__ = ["CompletionClient", "get_llm_for_agent"]
