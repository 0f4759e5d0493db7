"""Per-field prompt construction for brief generation.

Pure and deterministic: no network, no storage, no clock. The same
(field_id, topic, context, language) always yields the same string.

Every prompt is a shared CONTEXT block followed by a field TASK block.
Task blocks come from FIELD_TASKS, a closed table keyed by FieldId; anything
not in the table goes through _generic_task with the literal field id.
"""

from __future__ import annotations

from typing import Callable

from lib.settings import DEFAULT_OUTPUT_LANGUAGE
from schemas.generation import FieldId, GenerationContext


SYSTEM_PROMPT = (
    "You are a senior SEO content strategist. You write precise, publication-ready "
    "content brief fields for marketing articles. You follow format rules exactly "
    "and never add commentary, labels or markdown fences around your answer."
)


def _or_none(value: str) -> str:
    v = (value or "").strip()
    return v if v else "(none)"


def _context_block(*, topic: str, context: GenerationContext, language: str) -> str:
    lines = [
        "CONTEXT:",
        f"- Topic: {topic.strip()}",
        f"- Main keyword: {_or_none(context.main_keyword)}",
        f"- Entities: {_or_none(context.entities)}",
        "",
        "OUTPUT RULES:",
        f"- Write in {language}.",
        "- Return ONLY the field content. No preamble, no explanations, no quotes, no markdown fences.",
    ]
    current = (context.current_value or "").strip()
    if current:
        lines += [
            "",
            "CURRENT DRAFT (improve it, keep what already works):",
            current,
        ]
    return "\n".join(lines)


# -------------------------
# Task blocks
# -------------------------

def _seo_title_task(context: GenerationContext) -> str:
    return """
TASK: Write the SEO title.
- Maximum 60 characters, spaces included.
- Include the main keyword, as close to the start as reads naturally.
- One line only. No trailing period, no brand suffix.
""".strip()


def _meta_description_task(context: GenerationContext) -> str:
    return """
TASK: Write the meta description.
- Between 150 and 160 characters, spaces included.
- Include the main keyword once.
- State the reader benefit and end with a soft call to action.
- One line only.
""".strip()


def _entities_task(context: GenerationContext) -> str:
    return """
TASK: List the named entities the article should cover.
- 10 to 20 entities: people, organisations, products, places, concepts and standards relevant to the topic.
- One entity per line, no numbering, no bullets, no explanations.
- Keep any entities already given in the context and add the missing ones.
""".strip()


def _structure_task(context: GenerationContext) -> str:
    return """
TASK: Write the article structure (outline).
- One heading per line, each line prefixed by its level: "H1: ", "H2: " or "H3: ".
- Exactly one H1 line, first, containing the main keyword.
- 5 to 9 H2 sections; add H3 lines under an H2 only where they help.
- Cover the listed entities across the sections.
""".strip()


def _faq_task(context: GenerationContext) -> str:
    return """
TASK: Write the FAQ block.
- 6 to 8 question/answer pairs.
- Each pair is exactly two consecutive lines: the question on the first line, the answer on the second.
- No blank lines inside a pair; one blank line between pairs.
- No "Q:"/"A:" prefixes, no numbering.
- Answers are 1 to 3 sentences, factual and self-contained.
""".strip()


def _keywords_task(context: GenerationContext) -> str:
    return """
TASK: Write the keyword list.
- First line: the single primary keyword.
- Then 10 to 15 long-tail variants, one per line.
- Lowercase, no numbering, no bullets, no duplicates.
""".strip()


def _rich_content_task(context: GenerationContext) -> str:
    return """
TASK: Suggest rich content elements for the article.
- 4 to 8 suggestions, one per line, in the form "Type: what it shows" (e.g. "Table: ...", "Infographic: ...", "Video: ...", "Checklist: ...").
- Each suggestion must be specific to the topic.
""".strip()


def _internal_links_task(context: GenerationContext) -> str:
    return """
TASK: Suggest internal links.
- 5 to 10 lines, each in the form "Anchor: Target".
- Anchor is the clickable text as it would appear in the article.
- Target is the title or slug of the related page the link should point to.
""".strip()


def _description_task(context: GenerationContext) -> str:
    return """
TASK: Write the brief description for the writer.
- 2 to 4 sentences.
- Cover search intent, target audience and the angle that differentiates the article.
""".strip()


def _generic_task(field_id: str) -> str:
    return f"""
TASK: Write the content for the brief field "{field_id}".
- Keep it concise, specific to the topic and ready to paste into the brief.
""".strip()


FIELD_TASKS: dict[FieldId, Callable[[GenerationContext], str]] = {
    FieldId.seo_title: _seo_title_task,
    FieldId.meta_description: _meta_description_task,
    FieldId.entities: _entities_task,
    FieldId.structure: _structure_task,
    FieldId.faq: _faq_task,
    FieldId.keywords: _keywords_task,
    FieldId.rich_content: _rich_content_task,
    FieldId.internal_links: _internal_links_task,
    FieldId.description: _description_task,
}


def build_task_block(field_id: str, context: GenerationContext) -> str:
    fid = FieldId.parse(field_id)
    if fid is None:
        return _generic_task(field_id)
    return FIELD_TASKS[fid](context)


def build_field_prompt(
    field_id: str,
    topic: str,
    context: GenerationContext | None = None,
    *,
    language: str = DEFAULT_OUTPUT_LANGUAGE,
) -> str:
    ctx = context or GenerationContext()
    return (
        _context_block(topic=topic, context=ctx, language=language)
        + "\n\n"
        + build_task_block(field_id, ctx)
    )
