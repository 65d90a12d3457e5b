import asyncio
import threading
from unittest.mock import patch

from textual.widgets import Select, Static

from reviewbar.app import ReviewbarApp
from reviewbar.location import FixedLocator, LocationUnavailable
from reviewbar.models import Branch, Coordinate
from reviewbar.nearest import ERROR, SUCCESS, NearestBranchLookup
from reviewbar.review import TAKEAWAY

BRANCHES = [
    Branch(id="central", name="Chennai Central", map_link="https://maps.google.com/@13.0878,80.2785,15z"),
    Branch(id="blr", name="Bangalore", latitude=12.9716, longitude=77.5946),
]
GUEST_POSITION = Coordinate(13.0827, 80.2707)


class GatedLocator:
    """Holds the position back until ``release`` is set."""

    def __init__(self, coordinate):
        self.coordinate = coordinate
        self.release = threading.Event()

    def current_position(self):
        self.release.wait(timeout=5)
        return self.coordinate


class UnavailableLocator:
    def current_position(self):
        raise LocationUnavailable("no fix")


def _run(app, scenario):
    async def _go():
        with patch("reviewbar.api.get_branches", return_value=list(BRANCHES)), patch(
            "reviewbar.api.get_menus", return_value=[]
        ), patch("reviewbar.prefs.load_visit_type", return_value=TAKEAWAY):
            async with app.run_test() as pilot:
                await scenario(app, pilot)

    asyncio.run(_go())


async def _drain(app, pilot):
    for _ in range(5):
        await app.workers.wait_for_complete()
        await pilot.pause()


async def _wait_until(pilot, condition):
    for _ in range(100):
        if condition():
            return
        await pilot.pause(0.05)
    raise AssertionError("condition not reached")


def test_nearest_branch_is_auto_selected_when_blank():
    app = ReviewbarApp(lookup=NearestBranchLookup(FixedLocator(GUEST_POSITION)))

    async def scenario(app, pilot):
        await _drain(app, pilot)
        hint = app.query_one("#locate-hint", Static)
        assert app.locate_state == SUCCESS
        assert app.query_one("#branch-select", Select).value == "central"
        assert app._nearest_name == "Chennai Central"
        assert hint.has_class("-found")

    _run(app, scenario)


def test_existing_choice_is_kept_when_fix_arrives():
    locator = GatedLocator(GUEST_POSITION)
    app = ReviewbarApp(lookup=NearestBranchLookup(locator))

    async def scenario(app, pilot):
        await _wait_until(pilot, lambda: len(app._branches) == 2)
        branch_select = app.query_one("#branch-select", Select)
        branch_select.value = "blr"
        await pilot.pause()

        locator.release.set()
        await _drain(app, pilot)

        assert app.locate_state == SUCCESS
        assert branch_select.value == "blr"
        assert app._nearest_name == ""
        assert not app.query_one("#locate-hint", Static).has_class("-found")

    _run(app, scenario)


def test_manual_choice_clears_nearest_hint():
    app = ReviewbarApp(lookup=NearestBranchLookup(FixedLocator(GUEST_POSITION)))

    async def scenario(app, pilot):
        await _drain(app, pilot)
        assert app._nearest_name == "Chennai Central"

        app.query_one("#branch-select", Select).value = "blr"
        await pilot.pause()

        assert app._nearest_name == ""
        assert not app.query_one("#locate-hint", Static).has_class("-found")

    _run(app, scenario)


def test_location_failure_falls_back_quietly():
    app = ReviewbarApp(lookup=NearestBranchLookup(UnavailableLocator()))

    async def scenario(app, pilot):
        await _drain(app, pilot)
        hint = app.query_one("#locate-hint", Static)
        assert app.locate_state == ERROR
        assert app.query_one("#branch-select", Select).value is Select.NULL
        assert hint.has_class("-unavailable")
        assert not hint.has_class("-found")

    with patch.object(ReviewbarApp, "notify") as notify:
        _run(app, scenario)
    notify.assert_not_called()
