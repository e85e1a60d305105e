"""OpenAI LLM provider implementation."""

import os

import dspy

from taxxy.config import get_config


def create_openai_lm() -> dspy.LM:
    """
    Create dspy LM instance for OpenAI or OpenRouter.

    Returns:
        Configured dspy.LM instance for OpenAI/OpenRouter
    """
    config = get_config()

    model = config.openai.model
    api_key = config.openai.api_key

    # OpenRouter keys start with "sk-or-"
    is_openrouter = api_key and api_key.startswith("sk-or-")

    if is_openrouter:
        # LiteLLM reads the OpenRouter key from the environment
        os.environ["OPENROUTER_API_KEY"] = api_key
        if not model.startswith("openrouter/"):
            model = f"openrouter/openai/{model}"
    elif "/" not in model:
        model = f"openai/{model}"

    lm_kwargs = {
        "model": model,
        "api_key": api_key,
        "temperature": config.openai.temperature,
        "timeout": config.openai.timeout,
    }

    if config.openai.max_tokens:
        lm_kwargs["max_tokens"] = config.openai.max_tokens

    if config.openai.base_url:
        lm_kwargs["api_base"] = config.openai.base_url

    return dspy.LM(**lm_kwargs)
