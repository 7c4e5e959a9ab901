"""
Pydantic model for user-authored code drafts.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LANGUAGE = "csharp"


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class Draft(BaseModel):
    """A code draft owned by the local draft repository once saved."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), frozen=True)
    name: str = ""
    content: str = ""
    language: str = DEFAULT_LANGUAGE
    created_at: datetime = Field(default_factory=utc_now, frozen=True)
    last_modified: datetime = Field(default_factory=utc_now)
    is_published: bool = False

    @classmethod
    def new(
        cls,
        name: str | None = None,
        content: str = "",
        language: str = DEFAULT_LANGUAGE,
    ) -> "Draft":
        """Creates an unsaved draft, naming it after the current time if unnamed."""
        if not name:
            name = f"Draft_{datetime.now():%Y%m%d_%H%M%S}"
        return cls(name=name, content=content, language=language)
