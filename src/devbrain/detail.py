"""Per-entry detail view state: active term, diagram, practice."""

import logging
from typing import Optional

from .diagram.controller import DiagramController, RenderOutcome
from .entries.schema import KnowledgeEntry
from .entries.store import KeyValueStore, highlight_key
from .practice import PracticeService, PracticeSession
from .render.segmenter import RenderBlock, segment

logger = logging.getLogger(__name__)


class HighlightSession:
    """The active highlight term of one entry, persisted under its own key."""

    def __init__(self, store: KeyValueStore, entry_id: str):
        self.store = store
        self.entry_id = entry_id
        self.term: Optional[str] = None

    @property
    def key(self) -> str:
        return highlight_key(self.entry_id)

    def load(self) -> Optional[str]:
        stored = self.store.get(self.key)
        self.term = stored or None
        return self.term

    def set_term(self, term: Optional[str]) -> Optional[str]:
        term = (term or "").strip() or None
        self.term = term
        if term is None:
            self.store.remove(self.key)
        else:
            self.store.set(self.key, term)
        logger.debug(f"[STORE] Highlight for {self.entry_id}: {term!r}")
        return term

    def clear(self) -> None:
        self.set_term(None)


class DetailView:
    """Everything the detail screen of one entry needs.

    Clicking a diagram node is what changes the highlight term; the
    segmented text is recomputed from that term on every ``blocks`` call.
    """

    def __init__(
        self,
        entry: KnowledgeEntry,
        store: KeyValueStore,
        diagram: DiagramController,
        practice_service: Optional[PracticeService] = None,
    ):
        self.entry = entry
        self.highlight = HighlightSession(store, entry.id)
        self.diagram = diagram
        self.practice_service = practice_service
        self.practice: Optional[PracticeSession] = None

    def enter(self) -> "DetailView":
        self.highlight.load()
        return self

    def leave(self) -> None:
        self.practice = None
        if self.diagram.outcome is not None and self.diagram.outcome.bindings is not None:
            self.diagram.outcome.bindings.dispose()

    @property
    def active_term(self) -> Optional[str]:
        return self.highlight.term

    def select_term(self, label: str) -> None:
        """Node click handler: a second click on the same node clears the term."""
        if self.highlight.term and self.highlight.term.lower() == label.strip().lower():
            self.highlight.clear()
        else:
            self.highlight.set_term(label)

    def blocks(self) -> list[RenderBlock]:
        return segment(self.entry.raw_content, self.active_term)

    async def render_diagram(self) -> Optional[RenderOutcome]:
        return await self.diagram.render(self.entry.mermaid_chart, self.select_term)

    def click_node(self, node_id: str) -> Optional[str]:
        self.diagram.click(node_id)
        return self.active_term

    def start_practice(self) -> PracticeSession:
        """Create a fresh practice session, dropping any previous one."""
        if self.practice_service is None:
            raise RuntimeError("No practice service configured")
        self.practice = PracticeSession(self.practice_service, self.entry.context)
        return self.practice
