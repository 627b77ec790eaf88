"""Navigation state for the browser UI.

The page has three base modes (``home``, ``search`` and ``list``) plus two
modal overlays that can sit on top of any of them: the passcode prompt and
the add-item form. :class:`ViewState` is a small pydantic model that lives in
the user's session; each UI handler loads it, applies one transition and
saves it back, so there is no process-wide state.
"""

from __future__ import annotations

from typing import Any, Iterable, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel

from ..core.search import filter_records, normalize_query

Mode = Literal["home", "search", "list"]

SESSION_KEY = "view"
INVALID_PASSCODE = "Invalid passcode"
ADDED_MESSAGE = "Item added successfully!"


class ViewState(BaseModel):
    mode: Mode = "home"
    previous: Mode = "home"
    query: str = ""
    pinned_id: Optional[str] = None

    passcode_open: bool = False
    passcode_error: str = ""
    add_item_open: bool = False
    add_item_message: str = ""
    add_item_closing: bool = False
    authenticated: bool = False

    # ---- loading/saving ----

    @classmethod
    def from_session(cls, session: Mapping[str, Any]) -> "ViewState":
        raw = session.get(SESSION_KEY)
        if not isinstance(raw, Mapping):
            return cls()
        try:
            return cls.model_validate(raw)
        except ValueError:
            return cls()

    def save(self, session: dict[str, Any]) -> None:
        session[SESSION_KEY] = self.model_dump()

    # ---- base mode transitions ----

    def submit_query(self, query: str | None) -> None:
        """home/list/search --submit--> search. Blank queries are ignored."""

        if not normalize_query(query):
            return
        if self.mode != "search":
            self.previous = self.mode
        self.query = (query or "").strip()
        self.pinned_id = None
        self.mode = "search"

    def select_row(self, record_id: str, name: str) -> None:
        """list --click row--> search, showing just that record."""

        self.previous = "list"
        self.query = name
        self.pinned_id = record_id
        self.mode = "search"

    def view_list(self) -> None:
        if self.mode != "list":
            self.previous = self.mode
        self.pinned_id = None
        self.mode = "list"

    def back(self) -> None:
        """search --back--> previous. Returning to the list keeps the query."""

        if self.mode != "search":
            return
        if self.previous == "list":
            self.mode = "list"
            self.pinned_id = None
        else:
            self.clear()

    def clear(self) -> None:
        self.query = ""
        self.pinned_id = None
        self.mode = "home"
        self.previous = "home"

    # ---- modal transitions ----

    def open_add_item(self) -> None:
        self.add_item_message = ""
        self.add_item_closing = False
        if self.authenticated:
            self.add_item_open = True
            self.passcode_open = False
        else:
            self.passcode_open = True
            self.passcode_error = ""

    def passcode_accepted(self) -> None:
        self.authenticated = True
        self.passcode_open = False
        self.passcode_error = ""
        self.add_item_open = True

    def passcode_rejected(self) -> None:
        self.passcode_open = True
        self.passcode_error = INVALID_PASSCODE

    def item_added(self) -> None:
        """Keep the form up with a success note; the page closes it after a delay."""

        self.add_item_message = ADDED_MESSAGE
        self.add_item_closing = True

    def item_rejected(self, message: str) -> None:
        self.add_item_message = message
        self.add_item_closing = False

    def close_modals(self) -> None:
        self.passcode_open = False
        self.passcode_error = ""
        self.add_item_open = False
        self.add_item_message = ""
        self.add_item_closing = False

    # ---- rendering helpers ----

    def visible_records(self, records: Iterable[Any]) -> list[Any]:
        items: Sequence[Any] = list(records)
        if self.mode == "home":
            return []
        if self.mode == "search" and self.pinned_id:
            return [r for r in items if _record_id(r) == self.pinned_id]
        return filter_records(items, self.query)


def _record_id(record: Any) -> Any:
    if isinstance(record, Mapping):
        return record.get("id")
    return getattr(record, "id", None)
