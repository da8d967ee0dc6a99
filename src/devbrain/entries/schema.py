"""Pydantic models for knowledge entries and AI results."""

import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class UnknownCategoryError(ValueError):
    """Raised when a category string is not a member of Category."""


class Category(str, Enum):
    """Fixed set of entry categories."""

    PROCEDURE = "Procedure"
    DEFINITION = "Definition"
    TROUBLESHOOTING = "Troubleshooting"
    GENERAL = "General"
    SNIPPET = "Snippet"

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        """Match a category by value or member name, case-insensitively."""
        if isinstance(value, Category):
            return value
        needle = str(value or "").strip().lower()
        for member in cls:
            if needle in (member.value.lower(), member.name.lower()):
                return member
        raise UnknownCategoryError(f"Unknown category: {value!r}")


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def _none_to_list(value):
    return [] if value is None else value


class CodeSnippet(CamelModel):
    """A code block extracted from the captured notes."""

    language: str = "text"
    code: str
    description: str = ""


class KnowledgeEntry(CamelModel):
    """One stored unit of structured knowledge."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str
    summary: str = ""
    raw_content: str = ""
    category: Category = Category.GENERAL
    steps: list[str] = Field(default_factory=list)
    code_snippets: list[CodeSnippet] = Field(default_factory=list)
    mermaid_chart: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("steps", "code_snippets", "tags", "image_urls", mode="before")
    @classmethod
    def _lists_never_null(cls, value):
        return _none_to_list(value)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value):
        try:
            return Category.parse(value)
        except UnknownCategoryError:
            logger.warning(f"[STORE] Unrecognized category {value!r}, using {Category.GENERAL.value}")
            return Category.GENERAL

    @field_validator("mermaid_chart", mode="before")
    @classmethod
    def _blank_chart_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def context(self) -> str:
        """Text handed to the practice service as background."""
        return f"{self.summary}\n\n{self.raw_content}".strip()

    def matches(self, query: str = "", category: Optional[Category] = None) -> bool:
        """Check whether the entry passes a library search and category filter."""
        if category is not None and self.category != category:
            return False
        needle = (query or "").strip().lower()
        if not needle:
            return True
        return needle in self.title.lower() or any(needle in tag.lower() for tag in self.tags)


class AnalysisResult(CamelModel):
    """Structured output of the AI analysis of raw notes and images."""

    summary: str
    steps: list[str] = Field(default_factory=list)
    code_snippets: list[CodeSnippet] = Field(default_factory=list)
    mermaid_chart: str = ""
    suggested_tags: list[str] = Field(default_factory=list)
    suggested_category: str = Category.GENERAL.value
    title_suggestion: str
    extracted_content: str = ""

    @field_validator("steps", "code_snippets", "suggested_tags", mode="before")
    @classmethod
    def _lists_never_null(cls, value):
        return _none_to_list(value)

    @field_validator("mermaid_chart", "extracted_content", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @classmethod
    def fallback(cls) -> "AnalysisResult":
        """Result used when the analysis service fails."""
        return cls(
            summary="Could not analyze the content automatically.",
            steps=[],
            code_snippets=[],
            mermaid_chart="",
            suggested_tags=["Uncategorized"],
            suggested_category=Category.GENERAL.value,
            title_suggestion="New Entry",
            extracted_content="",
        )


class PracticeChallenge(CamelModel):
    """A practice question generated from an entry."""

    question: str
    context_type: Literal["code", "concept"] = "concept"


class EvaluationResult(CamelModel):
    """The model's judgement of a practice answer."""

    is_correct: bool
    score: int = Field(ge=0, le=100)
    feedback: str = ""
    correct_solution: str = ""

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return max(0, min(100, round(value)))
        return value
