"""Tests for DraftPublisher."""

from pathlib import Path

import pytest

from agp_local.core.publisher import DraftPublisher
from agp_local.models.draft import Draft
from agp_local.storage.drafts import DraftRepository


class FakePublishService:
    def __init__(self, accept: bool = True, error: Exception | None = None):
        self.accept = accept
        self.error = error
        self.published: list[tuple[str, str]] = []

    async def publish_code(self, name: str, content: str) -> bool:
        if self.error is not None:
            raise self.error
        self.published.append((name, content))
        return self.accept


@pytest.fixture
def repo(tmp_path: Path) -> DraftRepository:
    return DraftRepository(tmp_path / "Drafts")


@pytest.mark.asyncio
async def test_successful_publish_marks_and_saves(repo: DraftRepository):
    remote = FakePublishService()
    draft = Draft.new(name="Snake", content="class Snake {}")

    assert await DraftPublisher(remote, repo).publish(draft) is True

    assert remote.published == [("Snake", "class Snake {}")]
    assert draft.is_published is True
    assert repo.load(draft.id).is_published is True


@pytest.mark.asyncio
async def test_rejected_publish_leaves_flag_unset(repo: DraftRepository):
    draft = Draft.new(name="Snake", content="class Snake {}")
    repo.save(draft)

    assert await DraftPublisher(FakePublishService(accept=False), repo).publish(draft) is False

    assert draft.is_published is False
    assert repo.load(draft.id).is_published is False


@pytest.mark.asyncio
async def test_remote_error_is_reported_as_failure(repo: DraftRepository):
    remote = FakePublishService(error=TimeoutError("server timed out"))
    draft = Draft.new(name="Snake", content="code")

    assert await DraftPublisher(remote, repo).publish(draft) is False
    assert draft.is_published is False


@pytest.mark.asyncio
async def test_empty_content_is_not_sent(repo: DraftRepository):
    remote = FakePublishService()
    draft = Draft.new(name="Blank", content="   ")

    assert await DraftPublisher(remote, repo).publish(draft) is False
    assert remote.published == []
