"""
Jinja2 page rendering shared by routes, middleware and exception handlers
"""

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(request: Request, name: str, context: dict[str, Any] | None = None, status_code: int = 200) -> Response:
    """Render a page; the current principal is always available as ``principal``"""
    page_context = {"principal": getattr(request.state, "principal", None)}
    page_context.update(context or {})
    return templates.TemplateResponse(request, name, page_context, status_code=status_code)
