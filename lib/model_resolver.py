from __future__ import annotations

import logging
from typing import Optional

from lib.settings import DEFAULT_MODEL, BriefDeskSettings
from memory.model_defaults import ModelDefaultsMemory

logger = logging.getLogger(__name__)


class ModelResolver:
    """
    Picks the generation model for a call.

    Precedence: explicit override > persisted default > settings default > DEFAULT_MODEL.
    """

    def __init__(self, *, settings: BriefDeskSettings, memory: ModelDefaultsMemory | None = None) -> None:
        self._settings = settings
        self._memory = memory or ModelDefaultsMemory(settings.model_defaults_path)

    def persisted_default(self) -> Optional[str]:
        try:
            return self._memory.load()
        except (OSError, ValueError) as e:
            logger.warning("Could not read persisted default model: %s", e)
            return None

    def resolve_model(self, explicit_override: str | None = None) -> str:
        override = (explicit_override or "").strip()
        if override:
            return override
        return self.persisted_default() or self._settings.default_model or DEFAULT_MODEL

    def set_default(self, model: str | None) -> bool:
        """Best-effort persist; returns whether the write happened."""
        m = (model or "").strip()
        if not m:
            return False
        try:
            self._memory.save(m)
        except OSError as e:
            logger.warning("Could not persist default model %r: %s", m, e)
            return False
        logger.info("Default generation model set to %r", m)
        return True
