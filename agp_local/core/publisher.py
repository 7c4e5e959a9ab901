"""
Publishes drafts to the remote service and records the published state.
"""

import logging

from agp_local.models.draft import Draft
from agp_local.storage.drafts import DraftRepository

from .protocols import PublishService

log = logging.getLogger(__name__)


class DraftPublisher:
    """Sends a draft's content to the server and marks it as published."""

    def __init__(self, remote: PublishService, drafts: DraftRepository):
        self.remote = remote
        self.drafts = drafts

    async def publish(self, draft: Draft) -> bool:
        """
        Publishes the draft. The published flag is set and saved only after the
        server accepted it; a failed publish leaves the draft untouched.
        """
        if not draft.content.strip():
            log.warning(f"[yellow]Draft '{draft.name}' is empty, not publishing.[/yellow]")
            return False

        try:
            accepted = await self.remote.publish_code(draft.name, draft.content)
        except Exception as e:
            log.error(f"[red]✗ Publish failed:[/red] {draft.name} ({e})")
            return False

        if not accepted:
            log.error(f"[red]✗ The server rejected '{draft.name}'.[/red]")
            return False

        draft.is_published = True
        if not self.drafts.save(draft):
            log.warning(
                f"[yellow]'{draft.name}' was published but its local state could "
                "not be saved.[/yellow]"
            )
        return True
