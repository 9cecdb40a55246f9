"""Build crewAI LLM clients from ``LLMSettings``.

The primary client comes first; OpenRouter is the fallback. The advisor uses
whichever is available first, and the app runs on templated text when none is.
"""

from __future__ import annotations

import logging

from crewai import LLM

from seedble.errors import ValidationError
from seedble.settings import LLMSettings, SeedbleSettings

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_PREFIX = "openrouter/"


def primary_llm_kwargs(llm: LLMSettings) -> dict:
    """Constructor arguments for the primary LLM.

    Raises:
        ValidationError: If the API key or model name is missing.
    """
    if not llm.api_key:
        raise ValidationError("OPENAI_API_KEY is not set")
    if not llm.model_name:
        raise ValidationError("OPENAI_MODEL_NAME is not set")
    kwargs: dict = {"model": llm.model_name, "api_key": llm.api_key}
    if llm.base_url:
        kwargs["base_url"] = llm.base_url
    return kwargs


def openrouter_llm_kwargs(llm: LLMSettings) -> dict | None:
    """Constructor arguments for the OpenRouter fallback, or None when unset."""
    if not llm.openrouter_configured:
        return None
    model = llm.openrouter_model_name
    if not model.startswith(OPENROUTER_PREFIX):
        model = OPENROUTER_PREFIX + model
    return {"model": model, "base_url": OPENROUTER_BASE_URL, "api_key": llm.openrouter_api_key}


def get_available_llms(settings: SeedbleSettings) -> list[tuple[str, LLM]]:
    """(label, LLM) for every configured client, primary first.

    A client whose provider package is missing is skipped with a warning.
    """
    candidates: list[tuple[str, dict]] = []
    try:
        candidates.append(("primary", primary_llm_kwargs(settings.llm)))
    except ValidationError as e:
        logger.info("Primary LLM not configured: %s", e)

    openrouter = openrouter_llm_kwargs(settings.llm)
    if openrouter is None:
        logger.info("OpenRouter fallback not configured")
    else:
        candidates.append(("openrouter", openrouter))

    llms: list[tuple[str, LLM]] = []
    for label, kwargs in candidates:
        try:
            llms.append((label, LLM(**kwargs)))
        except ImportError as e:
            logger.warning("%s LLM unavailable: %s", label, e)
            continue
        logger.info("%s LLM: model=%s base_url=%s", label, kwargs["model"], kwargs.get("base_url", "(default)"))
    return llms


def create_default_llm(settings: SeedbleSettings) -> LLM | None:
    """The first available LLM, or None when AI is disabled or nothing is configured."""
    if not settings.ai_enabled:
        return None
    llms = get_available_llms(settings)
    return llms[0][1] if llms else None
