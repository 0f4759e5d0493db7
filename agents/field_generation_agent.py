"""Field generation agent.

Fills one brief field by asking an OpenAI-compatible chat-completions endpoint.

Flow (single linear request/response, no retries):
  1. pre-flight validation (field id, topic, endpoint, API key) -> ValidationError, no network
  2. model = ModelResolver.resolve_model(context.model_override)
  3. messages = [SYSTEM_PROMPT, build_field_prompt(...)]
  4. POST -> TransportError / ParseError / ExtractionError, or the trimmed text
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from agents.base import BaseAgent
from agents.llm_client import DEFAULT_MAX_TOKENS, ChatCompletionsClient
from agents.prompts import SYSTEM_PROMPT, build_field_prompt
from app_logging.run_logger import RunLogger
from lib.errors import BriefDeskError, ValidationError
from lib.model_resolver import ModelResolver
from lib.settings import BriefDeskSettings
from schemas.generation import GenerationContext, GenerationRequest

logger = logging.getLogger(__name__)


class FieldGenerationAgent(BaseAgent):
    name = "field-generation"

    def __init__(
        self,
        *,
        settings: BriefDeskSettings,
        resolver: ModelResolver | None = None,
        client: ChatCompletionsClient | None = None,
        run_logger: RunLogger | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self.settings = settings
        self.resolver = resolver or ModelResolver(settings=settings)
        self._client = client
        self.run_logger = run_logger
        self.max_tokens = max_tokens

    def _validate(self, field_id: str, topic: str) -> None:
        if not (field_id or "").strip():
            raise ValidationError("Field id is required")
        if not (topic or "").strip():
            raise ValidationError("Topic is required: fill in the content title or main keyword first")
        if not self.settings.endpoint_configured:
            raise ValidationError("Generation endpoint URL is not configured (set BRIEF_LLM_ENDPOINT)")
        if not self.settings.api_key_configured:
            raise ValidationError("Generation API key is not configured (set BRIEF_LLM_API_KEY)")

    def _get_client(self) -> ChatCompletionsClient:
        if self._client is None:
            self._client = ChatCompletionsClient(
                endpoint=self.settings.endpoint,
                api_key=self.settings.api_key,
                timeout=self.settings.timeout_seconds,
            )
        return self._client

    def build_messages(self, field_id: str, topic: str, context: GenerationContext) -> list[dict[str, str]]:
        user = build_field_prompt(field_id, topic, context, language=self.settings.output_language)
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user},
        ]

    def generate(self, field_id: str, topic: str, context: GenerationContext | None = None) -> str:
        ctx = context or GenerationContext()
        self._validate(field_id, topic)

        model = self.resolver.resolve_model(ctx.model_override)
        messages = self.build_messages(field_id, topic, ctx)
        log_input = {"field_id": field_id, "topic": topic, "model": model}

        if self.run_logger:
            self.run_logger.start(self.name, topic, log_input)

        logger.info("Generating %s for %r with model %s", field_id, topic, model)
        try:
            text = self._get_client().generate_text(model=model, messages=messages, max_tokens=self.max_tokens)
        except BriefDeskError as e:
            logger.warning("Generation of %s for %r failed: %s", field_id, topic, e)
            if self.run_logger:
                self.run_logger.error(self.name, topic, log_input, e)
            raise

        if self.run_logger:
            self.run_logger.end(self.name, topic, {"field_id": field_id, "text": text}, {"chars": len(text)})
        return text

    def run(self, input: Dict[str, Any]) -> Dict[str, Any]:
        req = input if isinstance(input, GenerationRequest) else GenerationRequest(**input)
        # Pin the model once so the reported name is the one actually used.
        model = self.resolver.resolve_model(req.context.model_override)
        ctx = req.context.model_copy(update={"model_override": model})
        text = self.generate(req.field_id, req.topic, ctx)
        return {"field_id": req.field_id, "model": model, "text": text}
