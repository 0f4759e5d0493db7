from pydantic import ConfigDict

from .base import SchemaBase
from .brief import NEW_BRIEF_TITLE


class BriefSession(SchemaBase):
    """
    Which brief is open in the editor.

    original_title is the title the brief had when it was opened (or last saved),
    so a save after a title edit becomes a rename instead of a duplicate.
    The orchestrating layer owns this value and passes it in; the core never stores it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    original_title: str = NEW_BRIEF_TITLE

    @property
    def is_new(self) -> bool:
        return self.original_title == NEW_BRIEF_TITLE

    @classmethod
    def for_title(cls, title: str) -> "BriefSession":
        return cls(original_title=title)
