"""pydantic-ai model builders for the two hosted providers.

Provider imports stay lazy so importing the service does not fail when an
optional provider extra or its credential is missing. Credentials are
checked here, before any request leaves the process.
"""

from __future__ import annotations

from typing import Optional

from studygen.core.config import settings
from studygen.core.errors import ProviderNotConfiguredError
from studygen.modules.artifacts.models import Provider


def require_credentials(provider: Provider) -> str:
    """Return the API key for ``provider`` or raise a configuration error."""
    if provider is Provider.OPENAI:
        if not settings.openai_api_key:
            raise ProviderNotConfiguredError("OpenAI", "OPENAI_API_KEY")
        return settings.openai_api_key
    if not settings.google_api_key:
        raise ProviderNotConfiguredError("Google", "GOOGLE_API_KEY")
    return settings.google_api_key


def _build_google_model(model_name: str):
    """Build Google Gemini model for pydantic-ai (lazy import)."""
    api_key = require_credentials(Provider.GOOGLE)
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    provider = GoogleProvider(api_key=api_key)
    return GoogleModel(model_name, provider=provider)


def _build_openai_model(model_name: str):
    """Build OpenAI chat model for pydantic-ai (lazy import)."""
    api_key = require_credentials(Provider.OPENAI)
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    provider = OpenAIProvider(api_key=api_key)
    return OpenAIChatModel(model_name, provider=provider)


def build_model(provider: Provider, model_name: Optional[str] = None):
    """Return a pydantic-ai Model for the given provider variant."""
    if provider is Provider.OPENAI:
        return _build_openai_model(model_name or settings.openai_model)
    return _build_google_model(model_name or settings.google_model)
