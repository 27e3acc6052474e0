"""
LLM client factory

Creates the chat model used for AI replies. Both supported providers expose
an OpenAI-compatible API, so a single LangChain ChatOpenAI client covers them.
"""

from typing import Optional
from loguru import logger

from chatrix.config.settings import settings, Settings
from chatrix.utils.errors import Misconfigured
from chatrix.utils.logger import mask_secret

SUPPORTED_PROVIDERS = ("groq", "openai")


def ensure_credentials(config: Optional[Settings] = None) -> str:
    """
    Return the provider API key or raise Misconfigured.

    Called before any network traffic so a missing key never reaches the provider.
    """
    config = config or settings
    provider = config.llm_provider.lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise Misconfigured(
            f"Unsupported LLM provider: {provider}. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
        )
    api_key = config.provider_api_key()
    if not api_key:
        raise Misconfigured(f"{provider.upper()}_API_KEY missing on server")
    return api_key


def create_llm(
    temperature: Optional[float] = None,
    max_completion_tokens: Optional[int] = None,
    model: Optional[str] = None,
    config: Optional[Settings] = None,
):
    """
    Factory function to create the chat model for the configured provider.

    Args:
        temperature: Generation temperature (defaults to settings.ai_temperature)
        max_completion_tokens: Output ceiling (defaults to settings.ai_max_tokens)
        model: Model name (defaults to settings.ai_model)
        config: Settings override (defaults to the global settings)

    Returns:
        LangChain ChatOpenAI instance

    Raises:
        Misconfigured: If the provider is unknown or its API key is absent
    """
    from langchain_openai import ChatOpenAI

    config = config or settings
    api_key = ensure_credentials(config)
    provider = config.llm_provider.lower()

    base_url = config.groq_base_url if provider == "groq" else (config.openai_base_url or None)
    model_name = model or config.ai_model

    logger.info(
        f"LLM Provider: {provider} | Model: {model_name} | API key loaded: {mask_secret(api_key)}"
    )

    return ChatOpenAI(
        model=model_name,
        api_key=api_key,
        base_url=base_url,
        temperature=temperature if temperature is not None else config.ai_temperature,
        top_p=config.ai_top_p,
        max_completion_tokens=max_completion_tokens or config.ai_max_tokens,
        n=1,
        max_retries=0,  # retry policy belongs to the caller
    )
