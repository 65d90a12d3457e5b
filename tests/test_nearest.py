from reviewbar.location import FixedLocator, LocationDenied, LocationTimeout
from reviewbar.models import Branch, Coordinate, Resolution
from reviewbar.nearest import ERROR, IDLE, LOADING, SUCCESS, NearestBranchLookup, locate_nearest

BRANCHES = [
    Branch(id="central", name="Chennai Central", map_link="https://maps.google.com/@13.0878,80.2785,15z"),
    Branch(id="blr", name="Bangalore", latitude=12.9716, longitude=77.5946),
]


class FailingLocator:
    def __init__(self, exc):
        self.exc = exc
        self.calls = 0

    def current_position(self):
        self.calls += 1
        raise self.exc


def test_locate_nearest_success():
    resolution = locate_nearest(FixedLocator(Coordinate(13.0827, 80.2707)), BRANCHES)
    assert resolution == Resolution(status=SUCCESS, branch_id="central", branch_name="Chennai Central")


def test_locate_nearest_location_failures_are_errors():
    for exc in (LocationDenied("no"), LocationTimeout("slow")):
        assert locate_nearest(FailingLocator(exc), BRANCHES) == Resolution(status=ERROR)


def test_locate_nearest_without_positions_is_error():
    branches = [Branch(id="a", name="A"), Branch(id="b", name="B")]
    resolution = locate_nearest(FixedLocator(Coordinate(13.0, 80.0)), branches)
    assert resolution.status == ERROR
    assert resolution.branch_id is None


def test_lookup_unsupported_stays_idle():
    lookup = NearestBranchLookup(None)
    assert not lookup.supported
    assert lookup.begin() is False
    assert lookup.status == IDLE


def test_lookup_success_transition():
    lookup = NearestBranchLookup(FixedLocator(Coordinate(13.0827, 80.2707)))
    assert lookup.status == IDLE
    assert lookup.begin() is True
    assert lookup.status == LOADING

    assert lookup.settle(locate_nearest(lookup.locator, BRANCHES)) is True
    assert lookup.status == SUCCESS
    assert lookup.resolution.branch_id == "central"


def test_lookup_error_is_terminal():
    lookup = NearestBranchLookup(FailingLocator(LocationTimeout("slow")))
    lookup.begin()
    lookup.settle(Resolution(status=ERROR))
    assert lookup.status == ERROR

    assert lookup.begin() is False
    assert lookup.settle(Resolution(status=SUCCESS, branch_id="central", branch_name="x")) is False
    assert lookup.status == ERROR


def test_lookup_ignores_results_after_close():
    lookup = NearestBranchLookup(FixedLocator(Coordinate(13.0827, 80.2707)))
    lookup.begin()
    lookup.close()

    assert lookup.closed
    assert lookup.settle(Resolution(status=SUCCESS, branch_id="central", branch_name="Chennai Central")) is False
    assert lookup.status == LOADING
    assert lookup.resolution is None


def test_settle_before_begin_is_ignored():
    lookup = NearestBranchLookup(FixedLocator(Coordinate(0.0, 0.0)))
    assert lookup.settle(Resolution(status=ERROR)) is False
    assert lookup.status == IDLE
