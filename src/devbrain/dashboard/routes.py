"""Dashboard routes (HTML pages + JSON API)."""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from markupsafe import Markup, escape
from pydantic import BaseModel

from .. import __version__
from ..capture import KnowledgeCapture
from ..config import Settings
from ..detail import DetailView
from ..diagram.controller import DiagramController, RenderOutcome
from ..diagram.renderer import DiagramRenderer
from ..entries.schema import Category, UnknownCategoryError
from ..entries.store import EntryRepository, KeyValueStore
from ..practice import PracticeSession, PracticeStateError
from ..render.highlight import highlight
from ..render.segmenter import RenderBlock

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


class CaptureRequest(BaseModel):
    """New entry from raw notes and/or images (data URLs or bare base64)."""

    text: str = ""
    images: list[str] = []


class HighlightRequest(BaseModel):
    term: Optional[str] = None


class AnswerRequest(BaseModel):
    answer: str


def highlight_html(text: str, term: Optional[str] = None) -> Markup:
    """Jinja filter: escape text and wrap active-term matches in <mark>."""
    parts = []
    for seg in highlight(text, term):
        piece = escape(seg.text)
        parts.append(Markup(f"<mark>{piece}</mark>") if seg.emphasized else piece)
    return Markup("").join(parts)


def block_to_dict(block: RenderBlock) -> dict:
    data = {"kind": block.kind}
    if block.kind == "paragraph":
        data["text"] = block.text
        data["segments"] = [asdict(s) for s in block.segments]
    elif block.kind == "table":
        data["headers"] = block.headers
        data["rows"] = block.rows
        data["headerSegments"] = [[asdict(s) for s in cell] for cell in block.header_segments]
        data["rowSegments"] = [[[asdict(s) for s in cell] for cell in row] for row in block.row_segments]
    return data


def outcome_to_dict(outcome: Optional[RenderOutcome]) -> dict:
    if outcome is None:
        return {"ok": False, "svg": None, "message": None, "attempt": 0, "nodes": {}}
    return {
        "ok": outcome.ok,
        "svg": outcome.markup or None,
        "message": outcome.message or None,
        "attempt": outcome.attempt,
        "nodes": outcome.bindings.labels if outcome.bindings else {},
    }


def practice_to_dict(session: Optional[PracticeSession]) -> dict:
    if session is None:
        return {
            "state": "idle",
            "challenge": None,
            "answer": "",
            "answerEditable": False,
            "evaluation": None,
            "error": None,
        }
    return {
        "state": session.state.value,
        "challenge": session.challenge.to_json_dict() if session.challenge else None,
        "answer": session.answer,
        "answerEditable": session.answer_editable,
        "evaluation": session.evaluation.to_json_dict() if session.evaluation else None,
        "error": session.error,
    }


def parse_category(value: Optional[str]) -> Optional[Category]:
    if not value or value == ALL_CATEGORIES:
        return None
    try:
        return Category.parse(value)
    except UnknownCategoryError as e:
        raise HTTPException(400, str(e)) from e


def create_router(
    settings: Settings,
    templates: Jinja2Templates,
    store: KeyValueStore,
    ai_service,
    renderer: DiagramRenderer,
) -> APIRouter:
    """Create the dashboard router."""
    router = APIRouter()
    repository = EntryRepository(store, seed_samples=settings.seed_samples)
    capture_pipeline = KnowledgeCapture(settings, ai_service, repository)

    # One detail view per entry, kept for the lifetime of the app
    views: dict[str, DetailView] = {}

    def get_view(entry_id: str) -> DetailView:
        entry = repository.get(entry_id)
        if entry is None:
            views.pop(entry_id, None)
            raise HTTPException(404, "Entry not found")
        view = views.get(entry_id)
        if view is None:
            view = DetailView(entry, store, DiagramController(renderer), ai_service).enter()
            views[entry_id] = view
        return view

    def get_practice(view: DetailView) -> PracticeSession:
        return view.practice or view.start_practice()

    @router.get("/", response_class=HTMLResponse)
    async def index(request: Request, q: str = "", category: str = ALL_CATEGORIES):
        """Library page."""
        for view in views.values():
            view.leave()
        entries = repository.search(q, parse_category(category))
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "entries": entries,
                "q": q,
                "category": category,
                "categories": [ALL_CATEGORIES, *(c.value for c in Category)],
            },
        )

    @router.get("/entries/{entry_id}", response_class=HTMLResponse)
    async def view_entry(request: Request, entry_id: str, visit: str = "new"):
        """Detail page with segmented content and the clickable diagram.

        ``visit=continue`` is sent by the page itself when it reloads after a
        node click, and keeps the practice round that is in progress.
        """
        view = get_view(entry_id)
        if visit != "continue":
            # Opening the page starts a fresh visit: no carried-over practice round
            view.leave()
            view.enter()
        outcome = await view.render_diagram()
        return templates.TemplateResponse(
            request,
            "detail.html",
            {
                "entry": view.entry,
                "term": view.active_term,
                "blocks": view.blocks(),
                "diagram": outcome,
                "display": view.diagram.display,
            },
        )

    @router.get("/api/health")
    async def health():
        return {"status": "ok", "version": __version__}

    @router.get("/api/entries")
    async def list_entries(q: str = "", category: str = ALL_CATEGORIES):
        entries = repository.search(q, parse_category(category))
        return [e.to_json_dict() for e in entries]

    @router.post("/api/entries", status_code=201)
    async def create_entry(req: CaptureRequest):
        try:
            entry = await capture_pipeline.capture(req.text, req.images)
        except ValueError as e:
            logger.warning("[DASHBOARD] Rejected capture: %s", e)
            raise HTTPException(400, str(e)) from e
        return entry.to_json_dict()

    @router.get("/api/entries/{entry_id}")
    async def get_entry(entry_id: str):
        return get_view(entry_id).entry.to_json_dict()

    @router.delete("/api/entries/{entry_id}")
    async def delete_entry(entry_id: str):
        view = views.pop(entry_id, None)
        if view is not None:
            view.leave()
        if not repository.delete(entry_id):
            raise HTTPException(404, "Entry not found")
        logger.info("[DASHBOARD] Deleted entry %s", entry_id)
        return {"deleted": entry_id}

    @router.get("/api/entries/{entry_id}/blocks")
    async def entry_blocks(entry_id: str):
        view = get_view(entry_id)
        return {"term": view.active_term, "blocks": [block_to_dict(b) for b in view.blocks()]}

    @router.put("/api/entries/{entry_id}/highlight")
    async def set_highlight(entry_id: str, req: HighlightRequest):
        view = get_view(entry_id)
        return {"term": view.highlight.set_term(req.term)}

    @router.get("/api/entries/{entry_id}/diagram")
    async def entry_diagram(entry_id: str):
        view = get_view(entry_id)
        return outcome_to_dict(await view.render_diagram())

    @router.post("/api/entries/{entry_id}/diagram/nodes/{node_id}/click")
    async def click_node(entry_id: str, node_id: str):
        view = get_view(entry_id)
        outcome = view.diagram.outcome
        if outcome is None or outcome.bindings is None or not outcome.bindings.attached:
            await view.render_diagram()
        return {"term": view.click_node(node_id)}

    @router.post("/api/entries/{entry_id}/diagram/fullscreen")
    async def toggle_fullscreen(entry_id: str):
        display = get_view(entry_id).diagram.display
        display.toggle_fullscreen()
        return {"fullscreen": display.fullscreen, "zoom": display.zoom, "style": display.container_style}

    @router.post("/api/entries/{entry_id}/diagram/zoom/{direction}")
    async def zoom(entry_id: str, direction: str):
        display = get_view(entry_id).diagram.display
        actions = {"in": display.zoom_in, "out": display.zoom_out, "reset": display.reset_zoom}
        if direction not in actions:
            raise HTTPException(404, "Unknown zoom action")
        actions[direction]()
        return {"fullscreen": display.fullscreen, "zoom": display.zoom, "style": display.container_style}

    @router.get("/api/entries/{entry_id}/practice")
    async def practice_state(entry_id: str):
        return practice_to_dict(get_view(entry_id).practice)

    @router.post("/api/entries/{entry_id}/practice/start")
    async def practice_start(entry_id: str):
        session = get_practice(get_view(entry_id))
        try:
            await session.start()
        except PracticeStateError as e:
            raise HTTPException(409, str(e)) from e
        return practice_to_dict(session)

    @router.post("/api/entries/{entry_id}/practice/submit")
    async def practice_submit(entry_id: str, req: AnswerRequest):
        session = get_practice(get_view(entry_id))
        try:
            await session.submit(req.answer)
        except PracticeStateError as e:
            raise HTTPException(409, str(e)) from e
        return practice_to_dict(session)

    @router.post("/api/entries/{entry_id}/practice/retry")
    async def practice_retry(entry_id: str):
        session = get_practice(get_view(entry_id))
        try:
            await session.retry()
        except PracticeStateError as e:
            raise HTTPException(409, str(e)) from e
        return practice_to_dict(session)

    return router
