"""Process configuration loaded from the environment.

Local development reads a .env file first (python-dotenv); values already
present in the environment win. Recognised variables:

    AZURE_OPENAI_ENDPOINT     base URL of the model backend
    AZURE_OPENAI_API_KEY      API key (empty = no auth header)
    OPENAI_API_VERSION        Azure REST API version
    AZURE_OPENAI_DEPLOYMENT   deployment (azure) or model name (openai)
    LLM_PROVIDER_FORMAT       "azure" | "openai"
    LLM_TIMEOUT               HTTP timeout in seconds
    GENERATION_TIMEOUT        overall generation deadline in seconds (unset = none)
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storygen.generator import StoryGenerator
from storygen.llm import HttpLLM, ProviderFormat

_ENV_VARS = {
    "endpoint": "AZURE_OPENAI_ENDPOINT",
    "api_key": "AZURE_OPENAI_API_KEY",
    "api_version": "OPENAI_API_VERSION",
    "deployment": "AZURE_OPENAI_DEPLOYMENT",
    "provider_format": "LLM_PROVIDER_FORMAT",
    "llm_timeout": "LLM_TIMEOUT",
    "generation_timeout": "GENERATION_TIMEOUT",
}


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    endpoint: str = ""
    api_key: str = ""
    api_version: str = "2024-08-01-preview"
    deployment: str = "gpt-4o"
    provider_format: ProviderFormat = "azure"
    llm_timeout: float = Field(default=120.0, gt=0)
    generation_timeout: float | None = Field(default=None, gt=0)


def load_settings(env_file: Path | None = None) -> Settings:
    """Read Settings from the environment, after loading env_file.

    Defaults to .env in the current working directory.
    """
    load_dotenv(env_file or Path.cwd() / ".env")
    values = {}
    for field, var in _ENV_VARS.items():
        raw = os.getenv(var, "").strip()
        if raw:
            values[field] = raw
    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        err = e.errors()[0]
        var = _ENV_VARS.get(str(err["loc"][0]), "?") if err["loc"] else "?"
        raise ConfigError(f"{var}: {err['msg']}") from e


def build_generator(settings: Settings) -> StoryGenerator:
    """Wire an HttpLLM configured from settings into a StoryGenerator."""
    llm = HttpLLM(
        provider_url=settings.endpoint,
        api_key=settings.api_key,
        provider_format=settings.provider_format,
        model=settings.deployment,
        api_version=settings.api_version,
        timeout=settings.llm_timeout,
    )
    return StoryGenerator(llm, timeout=settings.generation_timeout)
