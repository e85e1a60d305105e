"""Anthropic LLM provider implementation."""

import dspy

from taxxy.config import get_config


def create_anthropic_lm() -> dspy.LM:
    """
    Create dspy LM instance for Anthropic.

    Returns:
        Configured dspy.LM instance for Anthropic
    """
    config = get_config()

    # dspy uses "anthropic/model-name" format for Anthropic models
    model_name = f"anthropic/{config.anthropic.model}"

    lm_kwargs = {
        "model": model_name,
        "api_key": config.anthropic.api_key,
        "temperature": config.anthropic.temperature,
        "timeout": config.anthropic.timeout,
    }

    if config.anthropic.max_tokens:
        lm_kwargs["max_tokens"] = config.anthropic.max_tokens

    return dspy.LM(**lm_kwargs)
