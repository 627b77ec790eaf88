import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from ocie_helper.services.view_state import ViewState


@pytest.fixture()
def records():
    return [
        {"id": "a", "lineItemNumbers": ["DA150J"], "name": "BAG,DUFFEL", "partialCode": "8465", "alternateName": ""},
        {"id": "b", "lineItemNumbers": ["C05001"], "name": "CANTEEN,WATER", "partialCode": "1234", "alternateName": ""},
    ]


def test_initial_state_is_home():
    state = ViewState()
    assert state.mode == "home"
    assert not state.passcode_open and not state.add_item_open


def test_home_search_then_back_clears_query(records):
    state = ViewState()
    state.submit_query("canteen")

    assert state.mode == "search"
    assert state.previous == "home"
    assert [r["id"] for r in state.visible_records(records)] == ["b"]

    state.back()
    assert state.mode == "home"
    assert state.query == ""


def test_blank_query_does_not_leave_home():
    state = ViewState()
    state.submit_query("   ")
    assert state.mode == "home"


def test_list_search_then_back_keeps_query(records):
    state = ViewState()
    state.view_list()
    state.submit_query("bag")

    assert state.mode == "search"
    assert state.previous == "list"

    state.back()
    assert state.mode == "list"
    assert state.query == "bag"
    assert [r["id"] for r in state.visible_records(records)] == ["a"]


def test_clicking_a_row_pins_that_record(records):
    state = ViewState()
    state.view_list()
    state.select_row("b", "CANTEEN,WATER")

    assert state.mode == "search"
    assert state.previous == "list"
    assert state.query == "CANTEEN,WATER"
    assert [r["id"] for r in state.visible_records(records)] == ["b"]

    state.back()
    assert state.mode == "list"
    assert state.pinned_id is None


def test_list_without_query_shows_everything(records):
    state = ViewState()
    state.view_list()
    assert state.visible_records(records) == records


def test_add_item_requires_passcode_first():
    state = ViewState()
    state.open_add_item()
    assert state.passcode_open
    assert not state.add_item_open

    state.passcode_rejected()
    assert state.passcode_open
    assert state.passcode_error == "Invalid passcode"

    state.passcode_accepted()
    assert state.authenticated
    assert not state.passcode_open
    assert state.add_item_open


def test_authenticated_session_skips_passcode():
    state = ViewState(authenticated=True, mode="list")
    state.open_add_item()
    assert state.add_item_open
    assert not state.passcode_open
    assert state.mode == "list"


def test_successful_add_schedules_close():
    state = ViewState(authenticated=True, add_item_open=True)
    state.item_added()
    assert state.add_item_closing
    assert state.add_item_message == "Item added successfully!"

    state.close_modals()
    assert not state.add_item_open
    assert not state.add_item_closing


def test_round_trips_through_session():
    session = {}
    state = ViewState()
    state.view_list()
    state.submit_query("bag")
    state.save(session)

    restored = ViewState.from_session(session)
    assert restored == state


def test_corrupt_session_falls_back_to_home():
    assert ViewState.from_session({"view": {"mode": "bogus"}}).mode == "home"
    assert ViewState.from_session({"view": "nonsense"}).mode == "home"
