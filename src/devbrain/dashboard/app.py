"""FastAPI dashboard application."""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from .. import __version__
from ..config import Settings
from ..diagram.renderer import DiagramRenderer, MermaidInkRenderer
from ..entries.store import JsonFileStore, KeyValueStore
from ..llm import OpenAIClient
from .routes import create_router, highlight_html

TEMPLATES_DIR = Path(__file__).parent / "templates"


class CSRFProtectionMiddleware(BaseHTTPMiddleware):
    """Middleware to protect against CSRF attacks.

    State-changing requests (POST, PUT, DELETE, PATCH) must come without an
    Origin header (same-origin) or from one of the allowed local origins.
    """

    def __init__(self, app, allowed_origins: set[str]):
        super().__init__(app)
        self.allowed_origins = allowed_origins

    async def dispatch(self, request: Request, call_next):
        if request.method in ("POST", "PUT", "DELETE", "PATCH"):
            origin = request.headers.get("origin")
            if origin is not None and origin not in self.allowed_origins:
                return JSONResponse(
                    status_code=403,
                    content={"detail": "CSRF validation failed: invalid origin"},
                )

        return await call_next(request)


def create_app(
    settings: Settings,
    store: Optional[KeyValueStore] = None,
    ai_service: Optional[object] = None,
    renderer: Optional[DiagramRenderer] = None,
) -> FastAPI:
    """Create the FastAPI application.

    ``store``, ``ai_service`` (analysis + practice) and ``renderer`` default
    to the file store, the OpenAI client and mermaid.ink.
    """
    if store is None:
        store = JsonFileStore(settings.store_path)
    if ai_service is None:
        ai_service = OpenAIClient(settings)
    if renderer is None:
        renderer = MermaidInkRenderer(settings.mermaid_url, settings.mermaid_timeout)

    app = FastAPI(
        title="DevBrain",
        description="Personal developer knowledge base",
        version=__version__,
    )

    app.add_middleware(
        CSRFProtectionMiddleware,
        allowed_origins=settings.get_allowed_origins(),
    )

    templates = Jinja2Templates(directory=TEMPLATES_DIR)
    templates.env.filters["highlight"] = highlight_html

    router = create_router(settings, templates, store, ai_service, renderer)
    app.include_router(router)

    return app
