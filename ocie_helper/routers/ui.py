"""Browser pages.

Every button on the page posts to one of the small ``/ui/*`` actions below.
Each action loads the :class:`ViewState` from the session, applies a single
transition, saves it and redirects back to ``/``, which renders whatever the
state now says (post/redirect/get keeps the back button sane).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..core.config import settings
from ..core.errors import CatalogError, StoreError
from ..core.gate import WRITE_SESSION_FLAG, AccessGate, write_gate
from ..core.jinja import get_templates
from ..crud.equipment import list_all
from ..db.session import get_db
from ..deps.auth import grant, has_write_access, require_site_access, revoke_write
from ..services.blob_store import BlobStore, get_blob_store
from ..services.catalog import ImageUpload, add_item
from ..services.view_state import ViewState

logger = logging.getLogger(__name__)

templates = get_templates()

router = APIRouter(dependencies=[Depends(require_site_access)])

# Set by every /ui/* action just before it redirects back to the page.
ACTION_REDIRECT_KEY = "ui_redirect"

ADD_FORM_FIELDS = ("lineItemNumbers", "name", "partialCode", "alternateName", "sizeLabel")


def _home(request: Request) -> RedirectResponse:
    request.session[ACTION_REDIRECT_KEY] = True
    return RedirectResponse(url="/", status_code=303)


def _state(request: Request) -> ViewState:
    state = ViewState.from_session(request.session)
    # The write flag is the source of truth; the view only mirrors it.
    state.authenticated = has_write_access(request)
    return state


@router.get("/", response_class=HTMLResponse)
def index_page(request: Request, db: Session = Depends(get_db)):
    if not request.session.pop(ACTION_REDIRECT_KEY, False):
        # A reload or a fresh visit: the write grant and open modals do not survive it.
        revoke_write(request)
        state = _state(request)
        state.close_modals()
        state.save(request.session)
    else:
        state = _state(request)
    load_error = ""
    try:
        records = list_all(db)
    except StoreError:
        records = []
        load_error = "Failed to load equipment data"
    context = {
        "state": state,
        "records": records,
        "visible": state.visible_records(records),
        "load_error": load_error,
        "close_delay_ms": settings.ADD_ITEM_CLOSE_DELAY_MS,
        "app_name": settings.APP_NAME,
    }
    return templates.TemplateResponse(request, "index.html", context)


@router.post("/ui/search")
def ui_search(request: Request, query: str = Form("")):
    state = _state(request)
    state.submit_query(query)
    state.save(request.session)
    return _home(request)


@router.post("/ui/select")
def ui_select(request: Request, record_id: str = Form(...), name: str = Form("")):
    state = _state(request)
    state.select_row(record_id, name)
    state.save(request.session)
    return _home(request)


@router.post("/ui/list")
def ui_list(request: Request):
    state = _state(request)
    state.view_list()
    state.save(request.session)
    return _home(request)


@router.post("/ui/back")
def ui_back(request: Request):
    state = _state(request)
    state.back()
    state.save(request.session)
    return _home(request)


@router.post("/ui/clear")
def ui_clear(request: Request):
    state = _state(request)
    state.clear()
    state.save(request.session)
    return _home(request)


@router.post("/ui/add")
def ui_open_add(request: Request):
    state = _state(request)
    state.open_add_item()
    state.save(request.session)
    return _home(request)


@router.post("/ui/passcode")
def ui_passcode(request: Request, passcode: str = Form(""), gate: AccessGate = Depends(write_gate)):
    state = _state(request)
    if gate.verify(passcode):
        grant(request, WRITE_SESSION_FLAG)
        state.passcode_accepted()
    else:
        logger.info("passcode.rejected", extra={"extra_data": {"gate": gate.name}})
        state.passcode_rejected()
    state.save(request.session)
    return _home(request)


@router.post("/ui/items")
async def ui_add_item(
    request: Request,
    db: Session = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
):
    state = _state(request)
    if not state.authenticated:
        state.open_add_item()
        state.save(request.session)
        return _home(request)

    form = await request.form()
    fields = {name: form.get(name) for name in ADD_FORM_FIELDS}
    upload = form.get("image")
    image = None
    if upload is not None and hasattr(upload, "read") and getattr(upload, "filename", ""):
        image = ImageUpload(
            filename=upload.filename,
            data=await upload.read(),
            content_type=getattr(upload, "content_type", None),
        )

    try:
        await run_in_threadpool(add_item, db, blobs, fields, image)
    except CatalogError as exc:
        state.item_rejected(exc.message)
    else:
        state.item_added()
    state.save(request.session)
    return _home(request)


@router.post("/ui/close")
def ui_close(request: Request):
    state = _state(request)
    state.close_modals()
    state.save(request.session)
    return _home(request)
