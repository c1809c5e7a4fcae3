"""
LLM client - Provider-agnostic LLM integration using LiteLLM
"""

import os
import logging
from typing import Any, AsyncIterator

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_provider() -> str:
    """Get configured LLM provider"""
    return os.getenv("LLM_PROVIDER", "gemini")


def get_model() -> str:
    """Get configured model name"""
    return os.getenv("LLM_MODEL", "gemini-flash-lite-latest")


def get_model_string() -> str:
    """Get the full model string for LiteLLM"""
    provider = get_provider()
    model = get_model()

    # LiteLLM uses prefixed model names for some providers
    if provider in ("gemini", "anthropic", "ollama"):
        return f"{provider}/{model}"
    # OpenAI doesn't need a prefix
    return model


def _build_kwargs(
    messages: list[dict[str, str]],
    model: str | None,
    temperature: float,
    max_tokens: int,
    response_format: dict | None,
) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "model": model or get_model_string(),
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    # Not all models support JSON mode
    if response_format:
        kwargs["response_format"] = response_format
    return kwargs


async def stream_completion(
    messages: list[dict[str, str]],
    model: str | None = None,
    temperature: float = 0.6,
    max_tokens: int = 4096,
    response_format: dict | None = None,
) -> AsyncIterator[str]:
    """
    Stream a completion from the configured LLM provider.

    Yields:
        Text deltas as they arrive
    """
    import litellm

    _configure_api_keys()
    kwargs = _build_kwargs(messages, model, temperature, max_tokens, response_format)
    kwargs["stream"] = True

    logger.info(f"LLM Stream Request: model={kwargs['model']}, temperature={temperature}")

    try:
        response = await litellm.acompletion(**kwargs)
        async for chunk in response:
            delta = chunk.choices[0].delta.content if chunk.choices else None
            if delta:
                yield delta
    except Exception as e:
        logger.error(f"LLM Stream Error: {type(e).__name__}: {e}")
        raise


def _configure_api_keys():
    """Configure API keys for LiteLLM from environment"""
    import litellm

    provider = get_provider()
    logger.debug(f"Configuring API keys for provider: {provider}")

    if provider in ("gemini", "anthropic"):
        env_name = f"{provider.upper()}_API_KEY"
        api_key = os.getenv(env_name)
        if api_key:
            os.environ[env_name] = api_key
            logger.debug(f"{env_name} configured (length: {len(api_key)})")
        else:
            logger.warning(f"{env_name} not found in environment")

    elif provider == "openai":
        api_key = os.getenv("OPENAI_API_KEY")
        if api_key:
            litellm.api_key = api_key
            logger.debug(f"OPENAI_API_KEY configured (length: {len(api_key)})")
        else:
            logger.warning("OPENAI_API_KEY not found in environment")

    elif provider == "ollama":
        base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
        os.environ["OLLAMA_API_BASE"] = base_url
        logger.debug(f"OLLAMA_API_BASE configured: {base_url}")
