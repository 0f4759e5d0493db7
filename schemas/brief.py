from __future__ import annotations

from typing import Sequence

from pydantic import field_validator

from .base import SchemaBase


# Sessions that have not been saved yet carry this as their "original" title.
NEW_BRIEF_TITLE = "(new brief)"

# (attribute, column label) in store order. Row 0 of every store must equal the labels.
BRIEF_COLUMNS: tuple[tuple[str, str], ...] = (
    ("title_content", "content title"),
    ("seo_title", "SEO title"),
    ("meta_description", "meta description"),
    ("structure", "article structure"),
    ("faq", "FAQ"),
    ("main_keyword", "main keyword"),
    ("keywords", "keywords"),
    ("entities", "entities"),
    ("rich_content", "suggested rich content"),
    ("internal_links", "suggested internal links"),
    ("description", "description"),
)

BRIEF_FIELDS: tuple[str, ...] = tuple(attr for attr, _ in BRIEF_COLUMNS)
CANONICAL_HEADER: tuple[str, ...] = tuple(label for _, label in BRIEF_COLUMNS)


class Brief(SchemaBase):
    """
    One marketing-content brief. Keyed by title_content.

    Every attribute is plain text; empty string means "not filled yet".
    """

    title_content: str
    seo_title: str = ""
    meta_description: str = ""
    structure: str = ""
    faq: str = ""
    main_keyword: str = ""
    keywords: str = ""
    entities: str = ""
    rich_content: str = ""
    internal_links: str = ""
    description: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_is_empty(cls, v: object) -> object:
        return "" if v is None else v

    def has_title(self) -> bool:
        return bool(self.title_content.strip())

    def to_row(self) -> list[str]:
        return [getattr(self, attr) for attr in BRIEF_FIELDS]

    @classmethod
    def from_row(cls, row: Sequence[str]) -> "Brief":
        """Map a store row onto a Brief. Short rows are padded; extra cells are ignored."""
        cells = list(row)[: len(BRIEF_FIELDS)]
        cells += [""] * (len(BRIEF_FIELDS) - len(cells))
        return cls(**dict(zip(BRIEF_FIELDS, cells)))
