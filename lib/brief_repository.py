"""Brief repository.

Owns the tabular store that holds briefs:
- schema reconciliation (row 0 must equal the canonical header),
- lookup by exact title (first match in a top-to-bottom scan wins),
- rename-aware upsert,
- load.

Store failures never cross this boundary as exceptions: they come back as
RepositoryResult(ok=False, ...) so a caller can show a message instead of crashing.

Duplicate titles are not prevented. Lookup always returns the first match, so a
later duplicate is unreachable through this API.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional, Sequence

from pydantic import Field

from lib.errors import StoreError
from lib.table_store import Row, TableStore
from schemas.base import SchemaBase
from schemas.brief import CANONICAL_HEADER, NEW_BRIEF_TITLE, Brief

logger = logging.getLogger(__name__)


RepositoryAction = Literal["inserted", "updated", "created", "repaired", "unchanged", "loaded", "listed"]


class RepositoryResult(SchemaBase):
    ok: bool
    action: Optional[RepositoryAction] = None
    row_index: Optional[int] = None
    message: str = ""
    error: Optional[str] = None
    brief: Optional[Brief] = None
    titles: list[str] = Field(default_factory=list)

    @classmethod
    def failure(cls, message: str, *, error: str | None = None) -> "RepositoryResult":
        return cls(ok=False, message=message, error=error or message)


def _find_row(rows: Sequence[Row], title: str) -> Optional[int]:
    for idx in range(1, len(rows)):
        row = rows[idx]
        if row and row[0] == title:
            return idx
    return None


class BriefRepository:
    def __init__(self, *, store: TableStore) -> None:
        self._store = store

    @property
    def store(self) -> TableStore:
        return self._store

    # -------------------------
    # Schema
    # -------------------------
    def ensure_schema(self) -> RepositoryResult:
        """
        Guarantee row 0 equals CANONICAL_HEADER. Idempotent.

        Missing store -> created with the header only.
        Differing header -> row 0 overwritten in place; data rows untouched.
        """
        try:
            action = self._ensure_schema()
        except StoreError as e:
            logger.error("Schema check failed: %s", e)
            return RepositoryResult.failure("Could not prepare the brief store.", error=str(e))

        messages = {
            "created": "Brief store created.",
            "repaired": "Brief store header repaired.",
            "unchanged": "Brief store header is up to date.",
        }
        return RepositoryResult(ok=True, action=action, row_index=0, message=messages[action])

    def _ensure_schema(self) -> RepositoryAction:
        header = list(CANONICAL_HEADER)
        if not self._store.exists():
            self._store.create(header)
            logger.info("Created brief store with canonical header")
            return "created"

        rows = self._store.read_rows()
        if not rows:
            self._store.append_row(header)
            logger.info("Wrote canonical header into empty brief store")
            return "repaired"

        if rows[0] != header:
            logger.warning("Brief store header differs from canonical (%d columns); rewriting row 0", len(rows[0]))
            self._store.write_row(0, header)
            return "repaired"

        return "unchanged"

    # -------------------------
    # Reads
    # -------------------------
    def find_by_title(self, title: str) -> Optional[int]:
        """Row index (header is row 0) of the first exact title match, or None."""
        try:
            if not self._store.exists():
                return None
            return _find_row(self._store.read_rows(), title)
        except StoreError as e:
            logger.error("Lookup of %r failed: %s", title, e)
            return None

    def fetch(self, title: str) -> RepositoryResult:
        """Like load(), but keeps "not found" and "store unreadable" apart."""
        try:
            if not self._store.exists():
                return RepositoryResult(ok=True, action="loaded", message="Brief store does not exist yet.")
            rows = self._store.read_rows()
        except StoreError as e:
            logger.error("Load of %r failed: %s", title, e)
            return RepositoryResult.failure(f'Could not load brief "{title}".', error=str(e))

        idx = _find_row(rows, title)
        if idx is None:
            return RepositoryResult(ok=True, action="loaded", message=f'Brief "{title}" not found.')

        return RepositoryResult(
            ok=True,
            action="loaded",
            row_index=idx,
            message=f'Brief "{title}" loaded.',
            brief=Brief.from_row(rows[idx]),
        )

    def load(self, title: str) -> Optional[Brief]:
        return self.fetch(title).brief

    def list_titles(self) -> RepositoryResult:
        try:
            rows = self._store.read_rows() if self._store.exists() else []
        except StoreError as e:
            logger.error("Listing briefs failed: %s", e)
            return RepositoryResult.failure("Could not list briefs.", error=str(e))

        titles = [r[0] for r in rows[1:] if r and r[0]]
        return RepositoryResult(ok=True, action="listed", message=f"{len(titles)} brief(s).", titles=titles)

    # -------------------------
    # Writes
    # -------------------------
    def upsert(self, brief: Brief, original_title: str | None = None) -> RepositoryResult:
        """
        Insert or update one brief.

        Resolution order:
          1) original_title (non-empty, not NEW_BRIEF_TITLE) exists -> overwrite that row (rename)
          2) brief.title_content exists -> overwrite that row
          3) append
        """
        if not brief.has_title():
            return RepositoryResult.failure("Title required: a brief cannot be saved without a content title.")

        title = brief.title_content
        try:
            self._ensure_schema()
            rows = self._store.read_rows()

            idx: Optional[int] = None
            if original_title and original_title != NEW_BRIEF_TITLE:
                idx = _find_row(rows, original_title)
            if idx is None:
                idx = _find_row(rows, title)

            if idx is not None:
                self._store.write_row(idx, brief.to_row())
                renamed = bool(original_title) and original_title != title and rows[idx][0] == original_title
                logger.info("Updated brief row %d (%r%s)", idx, title, f" renamed from {original_title!r}" if renamed else "")
                message = (
                    f'Brief "{original_title}" renamed to "{title}" and updated.'
                    if renamed
                    else f'Brief "{title}" updated.'
                )
                return RepositoryResult(ok=True, action="updated", row_index=idx, message=message)

            new_idx = self._store.append_row(brief.to_row())
            logger.info("Inserted brief row %d (%r)", new_idx, title)
            return RepositoryResult(ok=True, action="inserted", row_index=new_idx, message=f'Brief "{title}" created.')
        except StoreError as e:
            logger.error("Saving brief %r failed: %s", title, e)
            return RepositoryResult.failure(f'Could not save brief "{title}".', error=str(e))
