from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import ConfigDict, Field, field_validator

from lib.errors import ValidationError
from schemas.base import SchemaBase


DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_OUTPUT_LANGUAGE = "English"

# Values shipped in sample .env files; treated exactly like "unset".
PLACEHOLDER_ENDPOINT = "https://YOUR-LLM-ENDPOINT/v1/chat/completions"
PLACEHOLDER_API_KEY = "YOUR_API_KEY"

DEFAULT_STORE_PATH = Path("data/briefs.csv")
DEFAULT_MODEL_DEFAULTS_PATH = Path("config/model_defaults.yaml")
DEFAULT_RUN_LOG_PATH = Path("output/run_log.jsonl")


class BriefDeskSettings(SchemaBase):
    """
    Explicit configuration value, built once at startup and handed to constructors.

    Component code never reads os.environ; only load_settings() does.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    endpoint: str = ""
    api_key: str = Field("", repr=False)
    default_model: Optional[str] = None
    timeout_seconds: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0)
    output_language: str = DEFAULT_OUTPUT_LANGUAGE

    store_path: Path = DEFAULT_STORE_PATH
    model_defaults_path: Path = DEFAULT_MODEL_DEFAULTS_PATH
    run_log_path: Path = DEFAULT_RUN_LOG_PATH

    @field_validator("endpoint", "api_key", mode="before")
    @classmethod
    def _strip(cls, v: object) -> str:
        return str(v or "").strip()

    @field_validator("default_model", mode="before")
    @classmethod
    def _blank_model_is_none(cls, v: object) -> Optional[str]:
        s = str(v or "").strip()
        return s or None

    @property
    def endpoint_configured(self) -> bool:
        return bool(self.endpoint) and self.endpoint != PLACEHOLDER_ENDPOINT

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY


def load_settings(environ: Mapping[str, str] | None = None) -> BriefDeskSettings:
    """
    Collect settings from the environment (or an explicit mapping, for tests).

    Call lib.env.load_env() first if .env support is wanted.
    """
    env = os.environ if environ is None else environ

    def _get(name: str) -> str:
        return str(env.get(name) or "").strip()

    data: dict[str, object] = {
        "endpoint": _get("BRIEF_LLM_ENDPOINT"),
        "api_key": _get("BRIEF_LLM_API_KEY"),
        "default_model": _get("BRIEF_LLM_MODEL") or None,
        "output_language": _get("BRIEF_OUTPUT_LANGUAGE") or DEFAULT_OUTPUT_LANGUAGE,
    }

    timeout = _get("BRIEF_LLM_TIMEOUT")
    if timeout:
        try:
            seconds = float(timeout)
        except ValueError as e:
            raise ValidationError("BRIEF_LLM_TIMEOUT must be a positive number") from e
        if not seconds > 0:
            raise ValidationError("BRIEF_LLM_TIMEOUT must be a positive number")
        data["timeout_seconds"] = seconds

    for key, name in (
        ("store_path", "BRIEF_STORE_PATH"),
        ("model_defaults_path", "BRIEF_MODEL_DEFAULTS_PATH"),
        ("run_log_path", "BRIEF_RUN_LOG_PATH"),
    ):
        raw = _get(name)
        if raw:
            data[key] = Path(raw)

    return BriefDeskSettings(**data)
