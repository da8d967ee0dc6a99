"""Capture pipeline: raw notes and images -> analysis -> stored entry."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

from .config import Settings
from .entries.schema import AnalysisResult, Category, KnowledgeEntry, UnknownCategoryError
from .entries.store import EntryRepository
from .utils import image_to_data_url, is_image_file

logger = logging.getLogger(__name__)


class AnalysisService(Protocol):
    async def analyze(self, text: str, images: list[str] | None = None) -> AnalysisResult: ...


def load_images(paths: list[Path]) -> list[str]:
    """Read image files into data URLs, skipping anything that is not an image."""
    images = []
    for path in paths:
        if not is_image_file(path):
            logger.warning(f"[CAPTURE] Skipping non-image file: {path.name}")
            continue
        images.append(image_to_data_url(path))
    return images


def build_entry(result: AnalysisResult, text: str, images: list[str]) -> KnowledgeEntry:
    """Turn an analysis result plus the user's input into a new entry."""
    try:
        category = Category.parse(result.suggested_category)
    except UnknownCategoryError:
        logger.warning(
            f"[CAPTURE] Model suggested unknown category {result.suggested_category!r}, "
            f"using {Category.GENERAL.value}"
        )
        category = Category.GENERAL

    raw_content = text.strip()
    if not raw_content and result.extracted_content:
        raw_content = result.extracted_content.strip()

    return KnowledgeEntry(
        title=result.title_suggestion.strip() or "New Entry",
        summary=result.summary,
        raw_content=raw_content,
        category=category,
        steps=result.steps,
        code_snippets=result.code_snippets,
        mermaid_chart=result.mermaid_chart or None,
        tags=list(dict.fromkeys(t.strip() for t in result.suggested_tags if t.strip())),
        image_urls=list(images),
        created_at=datetime.now(),
    )


class KnowledgeCapture:
    """Orchestrates capture: analyze -> build entry -> save."""

    def __init__(self, settings: Settings, analyzer: AnalysisService, repository: EntryRepository):
        self.settings = settings
        self.analyzer = analyzer
        self.repository = repository

    async def analyze(self, text: str, images: list[str]) -> AnalysisResult:
        """Run the analysis, falling back to a fixed result on any failure."""
        try:
            return await self.analyzer.analyze(text, images)
        except Exception as e:
            logger.error(f"[CAPTURE] Analysis failed: {type(e).__name__}: {e}")
            self._log_error(e)
            return AnalysisResult.fallback()

    async def capture(self, text: str = "", images: Optional[list[str]] = None) -> KnowledgeEntry:
        """Analyze the input and store the resulting entry."""
        images = images or []
        if not text.strip() and not images:
            raise ValueError("Nothing to capture: provide text or at least one image")

        logger.info(f"[CAPTURE] Starting: {len(text)} chars, {len(images)} image(s)")
        result = await self.analyze(text, images)
        entry = build_entry(result, text, images)
        self.repository.add(entry)
        logger.info(f"[CAPTURE] Completed: '{entry.title}' [{entry.category.value}]")
        return entry

    def _log_error(self, error: Exception) -> None:
        """Append error to log file."""
        self.settings.devbrain_path.mkdir(parents=True, exist_ok=True)
        with open(self.settings.error_log_path, "a", encoding="utf-8") as f:
            timestamp = datetime.now().isoformat()
            f.write(f"[{timestamp}] analysis: {type(error).__name__}: {error}\n")
