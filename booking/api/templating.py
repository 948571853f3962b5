from datetime import date
from pathlib import Path
from typing import Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from ..core.messages import current_locale, format_date, get_message, status_label
from ..core.security import generate_csrf_token
from ..core.sessions import get_session

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def csrf_token(request: Request) -> str:
    """Return the session's anti-forgery token, issuing one on first render."""
    session = get_session(request)
    token = session.get("csrf_token")
    if not token:
        token = generate_csrf_token()
        session["csrf_token"] = token
    return token


def format_time(value) -> str:
    return value.strftime("%H:%M") if value else ""


templates.env.globals["csrf_token"] = csrf_token
templates.env.globals["get_message"] = get_message
templates.env.globals["current_locale"] = current_locale
templates.env.filters["status_label"] = status_label
templates.env.filters["display_date"] = format_date
templates.env.filters["display_time"] = format_time


def render(request: Request, name: str, context: Optional[dict] = None, status_code: int = 200):
    session = get_session(request)
    page_context = {
        "username": session.get("username"),
        "is_authenticated": session.get("user_id") is not None,
        "flash": session.pop_flash(),
        "current_year": date.today().year,
    }
    page_context.update(context or {})
    return templates.TemplateResponse(request, name, page_context, status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)
