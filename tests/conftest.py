"""Shared test fixtures for Spark tests."""
from contextlib import ExitStack
from typing import Union
from unittest.mock import patch

import pytest

from spark.app.config import Settings
from spark.storage.db import init_db
from spark.thinking.models import ContentBlocks, LLMClient

# Every module that reads settings through its own imported reference
_SETTINGS_CONSUMERS = (
    "spark.app.config",
    "spark.app.paths",
    "spark.storage.db",
    "spark.ideas.service",
    "spark.ingest.url_meta",
    "spark.thinking.agent",
    "spark.thinking.attachments",
    "spark.scouts.generator",
)


@pytest.fixture()
def tmp_settings(tmp_path):
    """Create a Settings instance backed by a temporary directory.

    Patches get_settings globally so all modules use the temp paths.
    """
    settings = Settings(
        db_path=tmp_path / "test.db",
        log_path=tmp_path / "logs" / "app.log",
        llm_provider="none",
        anthropic_api_key="",
        max_active_ideas=5,
    )
    settings.log_path.parent.mkdir(parents=True, exist_ok=True)

    with ExitStack() as stack:
        for module in _SETTINGS_CONSUMERS:
            stack.enter_context(patch(f"{module}.get_settings", return_value=settings))
        init_db()
        yield settings


class FakeLLMClient(LLMClient):
    """Records every call and answers with a canned reply."""

    def __init__(self, reply: str = "What would change if you were wrong?"):
        self.reply = reply
        self.calls: list[dict] = []

    def generate(self, system: str, content: Union[str, ContentBlocks], max_tokens: int = 400) -> str:
        self.calls.append({"system": system, "content": content, "max_tokens": max_tokens})
        return self.reply

    @property
    def last(self) -> dict:
        return self.calls[-1]


@pytest.fixture()
def fake_llm():
    return FakeLLMClient()


@pytest.fixture()
def sample_idea(tmp_settings):
    """An idea with a thought, an article, and a legacy-keyed file."""
    from spark.storage.dao import Element, ElementDAO, Idea, IdeaDAO

    idea = Idea(
        id="idea-1",
        title="Slow software",
        created_at="2025-01-10T09:00:00+00:00",
        updated_at="2025-01-10T09:00:00+00:00",
        current_thinking="Tools that make you wait might make you think.",
    )
    IdeaDAO().insert(idea)

    elements = [
        Element(
            id="el-1",
            idea_id="idea-1",
            type="thought",
            content="Latency as a feature, not a bug",
            created_at="2025-01-10T10:00:00+00:00",
        ),
        Element(
            id="el-2",
            idea_id="idea-1",
            type="article",
            metadata={
                "url": "https://example.com/slow-web",
                "title": "The Slow Web",
                "description": "A manifesto for timely over real-time",
            },
            created_at="2025-01-11T10:00:00+00:00",
        ),
        Element(
            id="el-3",
            idea_id="idea-1",
            type="file",
            metadata={"public_url": "https://cdn.example.com/notes.pdf", "file_name": "notes.pdf"},
            created_at="2025-01-12T10:00:00+00:00",
        ),
    ]
    dao = ElementDAO()
    for el in elements:
        dao.insert(el)

    return idea, elements
