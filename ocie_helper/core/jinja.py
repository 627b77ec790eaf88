"""Jinja2 environment for the browser UI, with the few filters the pages use."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from fastapi.templating import Jinja2Templates

from .config import settings


def _to_dt(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _fmt_date(value: Any, fmt: str = "%Y-%m-%d") -> str:
    dt = _to_dt(value)
    return dt.strftime(fmt) if dt else ""


def _join_codes(value: Iterable[Any] | None, sep: str = " / ") -> str:
    """Render line item numbers the way they are written on hand receipts: ``A / B``."""

    if not value:
        return ""
    if isinstance(value, str):
        return value
    return sep.join(str(code) for code in value)


def _is_url(value: Any) -> bool:
    return isinstance(value, str) and (value.startswith(("http://", "https://", "/")))


def get_templates() -> Jinja2Templates:
    """Create a ``Jinja2Templates`` instance with our filters registered."""

    templates = Jinja2Templates(directory=str(settings.templates_dir))
    env = templates.env
    env.filters["fmt_date"] = _fmt_date
    env.filters["join_codes"] = _join_codes
    env.tests["url"] = _is_url
    return templates
