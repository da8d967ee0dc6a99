"""Shared pytest fixtures for DevBrain tests."""

from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from devbrain.config import Settings
from devbrain.entries.schema import Category, CodeSnippet, KnowledgeEntry
from devbrain.entries.store import EntryRepository, MemoryStore


@pytest.fixture
def settings(tmp_path: Path, monkeypatch) -> Settings:
    """Create settings with a temporary data root."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-api-key")
    return Settings(
        data_root=tmp_path,
        openai_api_key="test-api-key",
        seed_samples=False,
        retry_base_delay=1.0,
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def repository(store: MemoryStore) -> EntryRepository:
    return EntryRepository(store, seed_samples=False)


@pytest.fixture
def sample_entry() -> KnowledgeEntry:
    """Create a complete sample entry."""
    return KnowledgeEntry(
        id="entry-1",
        title="Undo the last commit",
        summary="Use a soft reset to undo a commit and keep changes staged.",
        raw_content=(
            "Use **git reset** to undo.\n"
            "\n"
            "| Flag | Effect |\n"
            "|---|---|\n"
            "| --soft | keeps changes staged |\n"
            "| --hard | discards changes |\n"
            "Be careful with --hard."
        ),
        category=Category.PROCEDURE,
        steps=["Open a terminal.", "Run git reset --soft HEAD~1"],
        code_snippets=[
            CodeSnippet(language="bash", code="git reset --soft HEAD~1", description="Soft reset"),
        ],
        mermaid_chart="flowchart LR\n  A[Commit made] --> B[Run git reset]",
        tags=["git", "terminal"],
        image_urls=[],
        created_at=datetime(2024, 1, 15, 10, 0, 0),
    )


@pytest.fixture
def sample_analysis() -> dict:
    """Sample analysis response as the model returns it."""
    return {
        "titleSuggestion": "Undo the last commit",
        "summary": "Soft reset keeps changes staged.",
        "steps": ["Open a terminal.", "Run git reset --soft HEAD~1"],
        "codeSnippets": [
            {"language": "bash", "code": "git reset --soft HEAD~1", "description": "Soft reset"},
        ],
        "mermaidChart": "flowchart TD\nA[Commit] --> B[Reset]",
        "suggestedTags": ["git", "version-control"],
        "suggestedCategory": "Procedure",
        "extractedContent": "",
    }


@pytest.fixture
def sample_svg() -> str:
    """Trimmed SVG in the shape Mermaid produces for a two-node flowchart."""
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" id="placeholder" width="100%" '
        'style="max-width: 312px; background-color: white;" viewBox="0 0 312 80">'
        '<g class="root"><g class="nodes">'
        '<g class="node default" id="flowchart-A-0" transform="translate(60,40)">'
        '<rect class="basic label-container" width="100" height="40"/>'
        '<g class="label"><text>"Commit (made)"</text></g>'
        "</g>"
        '<g class="node default" id="flowchart-B-1" transform="translate(240,40)">'
        '<rect class="basic label-container" width="100" height="40"/>'
        '<g class="label"><text>[Run git reset]</text></g>'
        "</g>"
        "</g></g></svg>"
    )


@pytest.fixture
def mock_renderer(sample_svg: str):
    """Diagram renderer that always succeeds."""
    renderer = MagicMock()
    renderer.render = AsyncMock(return_value=sample_svg)
    return renderer
