"""Application settings read from environment variables.

The entry point loads a ``.env`` file (python-dotenv) before calling
``load_settings()``; this module only reads ``os.environ``.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from seedble.errors import ValidationError


class LLMSettings(BaseModel):
    """Connection details for the primary LLM and the OpenRouter fallback."""

    model_name: str = ""
    api_key: str = Field(default="", repr=False)
    base_url: str = ""
    openrouter_model_name: str = ""
    openrouter_api_key: str = Field(default="", repr=False)

    @property
    def primary_configured(self) -> bool:
        return bool(self.model_name and self.api_key)

    @property
    def openrouter_configured(self) -> bool:
        return bool(self.openrouter_model_name and self.openrouter_api_key)


class SeedbleSettings(BaseModel):
    """Runtime configuration."""

    data_path: str = "seedble_data.json"
    team_size: int = Field(default=4, ge=1, le=50)
    auto_select: int = Field(default=3, ge=0, le=50)
    variance_threshold: float | None = Field(default=None, ge=0, le=5)
    ai_enabled: bool = True
    log_level: str = "INFO"
    llm: LLMSettings = Field(default_factory=LLMSettings)


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer, got '{raw}'") from exc


def _float_env(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a number, got '{raw}'") from exc


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValidationError(f"{name} must be a boolean, got '{raw}'")


def _str_env(name: str) -> str:
    return os.getenv(name, "").strip()


def load_settings() -> SeedbleSettings:
    """Build settings from SEEDBLE_* variables plus the OPENAI_* and OPENROUTER_* LLM variables.

    Raises:
        ValidationError: If a variable holds an unparsable or out-of-range value.
    """
    values = {
        "data_path": os.getenv("SEEDBLE_DATA_PATH", "") or "seedble_data.json",
        "team_size": _int_env("SEEDBLE_TEAM_SIZE", 4),
        "auto_select": _int_env("SEEDBLE_AUTO_SELECT", 3),
        "variance_threshold": _float_env("SEEDBLE_VARIANCE_THRESHOLD"),
        "ai_enabled": _bool_env("SEEDBLE_AI_ENABLED", True),
        "log_level": (os.getenv("SEEDBLE_LOG_LEVEL", "") or "INFO").upper(),
        "llm": LLMSettings(
            model_name=_str_env("OPENAI_MODEL_NAME"),
            api_key=_str_env("OPENAI_API_KEY"),
            base_url=_str_env("OPENAI_BASE_URL"),
            openrouter_model_name=_str_env("OPENROUTER_MODEL_NAME"),
            openrouter_api_key=_str_env("OPENROUTER_API_KEY"),
        ),
    }
    try:
        return SeedbleSettings(**values)
    except ValueError as exc:
        raise ValidationError(f"Invalid settings: {exc}") from exc
