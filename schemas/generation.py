from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, ClassVar, Optional, Union

from pydantic import Field, StringConstraints, field_validator

from .base import SchemaBase, WireShape


class FieldId(str, Enum):
    seo_title = "seo_title"
    meta_description = "meta_description"
    entities = "entities"
    structure = "structure"
    faq = "faq"
    keywords = "keywords"
    rich_content = "rich_content"
    internal_links = "internal_links"
    description = "description"

    @classmethod
    def parse(cls, raw: str) -> Optional["FieldId"]:
        """Accept snake_case values and the camelCase ids UI callers send (seoTitle)."""
        key = re.sub(r"(?<!^)(?=[A-Z])", "_", (raw or "").strip()).lower()
        try:
            return cls(key)
        except ValueError:
            return None


class GenerationContext(SchemaBase):
    main_keyword: str = ""
    entities: str = ""
    current_value: str = ""
    model_override: Optional[str] = None

    @field_validator("main_keyword", "entities", "current_value", mode="before")
    @classmethod
    def _none_is_empty(cls, v: object) -> object:
        return "" if v is None else v


class GenerationRequest(SchemaBase):
    field_id: str
    topic: str
    context: GenerationContext = Field(default_factory=GenerationContext)


# -------------------------
# Response shapes
# -------------------------
# Ordered by priority; extraction tries them top to bottom and the first
# structural match wins. Blank strings do not count as a match.
# Only element 0 of choices/data is inspected; later elements may be anything.

NonBlank = Annotated[str, StringConstraints(min_length=1, pattern=r"\S")]


class _ChatMessage(WireShape):
    content: NonBlank


class _ChatChoice(WireShape):
    message: _ChatMessage


class _TextChoice(WireShape):
    text: NonBlank


class _DataItem(WireShape):
    content: NonBlank


class ChatCompletion(WireShape):
    kind: ClassVar[str] = "chat_completion"
    choices: list[_ChatChoice] = Field(min_length=1)

    @field_validator("choices", mode="before")
    @classmethod
    def _first_choice(cls, v: object) -> object:
        return v[:1] if isinstance(v, list) else v

    @property
    def text(self) -> str:
        return self.choices[0].message.content


class TextCompletion(WireShape):
    kind: ClassVar[str] = "text_completion"
    choices: list[_TextChoice] = Field(min_length=1)

    @field_validator("choices", mode="before")
    @classmethod
    def _first_choice(cls, v: object) -> object:
        return v[:1] if isinstance(v, list) else v

    @property
    def text(self) -> str:
        return self.choices[0].text


class DataArray(WireShape):
    kind: ClassVar[str] = "data_array"
    data: list[_DataItem] = Field(min_length=1)

    @field_validator("data", mode="before")
    @classmethod
    def _first_item(cls, v: object) -> object:
        return v[:1] if isinstance(v, list) else v

    @property
    def text(self) -> str:
        return self.data[0].content


class ResultField(WireShape):
    kind: ClassVar[str] = "result_field"
    result: NonBlank

    @property
    def text(self) -> str:
        return self.result


ResponseShape = Union[ChatCompletion, TextCompletion, DataArray, ResultField]

RESPONSE_SHAPES: tuple[type[ResponseShape], ...] = (ChatCompletion, TextCompletion, DataArray, ResultField)
