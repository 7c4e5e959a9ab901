"""
Persists code drafts, one JSON file per draft id.
"""

import logging
from pathlib import Path

from agp_local.models.draft import Draft, utc_now

from .record_store import RecordStore

log = logging.getLogger(__name__)


class DraftRepository:
    """Saves, loads and lists the user's code drafts."""

    def __init__(self, drafts_root: Path):
        self._store: RecordStore[Draft] = RecordStore(drafts_root, Draft)

    @property
    def root(self) -> Path:
        return self._store.base_dir

    def save(self, draft: Draft) -> bool:
        """Refreshes the draft's modification time and persists it."""
        draft.last_modified = utc_now()
        saved = self._store.put(draft.id, draft)
        if saved:
            log.debug(f"Saved draft '{draft.name}' ({draft.id}).")
        return saved

    def load(self, draft_id: str) -> Draft | None:
        return self._store.get(draft_id)

    def list_all_recent_first(self) -> list[Draft]:
        """Returns all drafts, most recently modified first; ties ordered by id."""
        drafts = sorted(self._store.list_all(), key=lambda d: d.id)
        # Stable sort keeps the id order within equal timestamps.
        drafts.sort(key=lambda d: d.last_modified, reverse=True)
        return drafts

    def delete(self, draft_id: str) -> bool:
        return self._store.delete(draft_id)
