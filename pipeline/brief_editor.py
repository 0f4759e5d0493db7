from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from agents.field_generation_agent import FieldGenerationAgent
from lib.brief_repository import BriefRepository, RepositoryResult
from lib.errors import ValidationError
from schemas.brief import BRIEF_FIELDS, Brief
from schemas.generation import FieldId, GenerationContext
from schemas.session import BriefSession


@dataclass
class BriefEditor:
    """
    Composes the repository and the generation agent for a UI/CLI caller.

    Session state is explicit: every call takes a BriefSession and the calls
    that can change it return the new one.
    """

    repository: BriefRepository
    agent: Optional[FieldGenerationAgent] = None

    def new(self) -> tuple[Brief, BriefSession]:
        return Brief(title_content=""), BriefSession()

    def open(self, title: str) -> tuple[Optional[Brief], BriefSession]:
        brief = self.repository.load(title)
        if brief is None:
            return None, BriefSession()
        return brief, BriefSession.for_title(brief.title_content)

    def save(self, brief: Brief, session: BriefSession) -> tuple[RepositoryResult, BriefSession]:
        result = self.repository.upsert(brief, original_title=session.original_title)
        if not result.ok:
            return result, session
        return result, BriefSession.for_title(brief.title_content)

    def fill_field(
        self,
        brief: Brief,
        field_id: str,
        *,
        topic: str | None = None,
        model_override: str | None = None,
    ) -> Brief:
        """
        Generate one field from the brief's own context and return an updated copy.

        Topic defaults to the content title, then the main keyword.
        """
        if self.agent is None:
            raise ValidationError("No generation agent configured")

        fid = FieldId.parse(field_id)
        if fid is None or fid.value not in BRIEF_FIELDS:
            raise ValidationError(f"Unknown brief field: {field_id!r}")

        context = GenerationContext(
            main_keyword=brief.main_keyword,
            entities=brief.entities,
            current_value=getattr(brief, fid.value),
            model_override=model_override,
        )
        subject = (topic or "").strip() or brief.title_content.strip() or brief.main_keyword.strip()

        text = self.agent.generate(fid.value, subject, context)
        return brief.model_copy(update={fid.value: text})
