"""Entry schema, persistence, and sample data."""

from .schema import (
    AnalysisResult,
    Category,
    CodeSnippet,
    EvaluationResult,
    KnowledgeEntry,
    PracticeChallenge,
    UnknownCategoryError,
)
from .store import EntryRepository, JsonFileStore, KeyValueStore, MemoryStore, highlight_key

__all__ = [
    "AnalysisResult",
    "Category",
    "CodeSnippet",
    "EntryRepository",
    "EvaluationResult",
    "JsonFileStore",
    "KeyValueStore",
    "KnowledgeEntry",
    "MemoryStore",
    "PracticeChallenge",
    "UnknownCategoryError",
    "highlight_key",
]
