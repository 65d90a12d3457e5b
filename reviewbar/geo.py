"""Nearest-branch resolution from map links and branch coordinates."""

from __future__ import annotations

import math
import re
from typing import Any, Iterable

from reviewbar.models import Branch, Coordinate, NearestBranch, ResolvedBranch

EARTH_RADIUS_KM = 6371.0

_NUMBER = r"(-?\d+\.\d+)"

# Tried in order, first match wins. Append new map URL conventions here.
COORDINATE_PATTERNS: list[re.Pattern[str]] = [
    # .../@13.0878,80.2785,15z
    re.compile(rf"@{_NUMBER},{_NUMBER}"),
    # ...?q=13.05,80.21 or ...&q=13.05,80.21
    re.compile(rf"[?&]q={_NUMBER},{_NUMBER}"),
    # .../place/13.1,80.2 or ...ll=13.1,80.2
    re.compile(rf"(?:/place/|ll=){_NUMBER},{_NUMBER}"),
]


def make_coordinate(latitude: Any, longitude: Any) -> Coordinate | None:
    """Build a Coordinate, or None if either value is missing, not numeric or out of range."""
    if latitude is None or longitude is None:
        return None
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        return None
    try:
        lat = float(latitude)
        lng = float(longitude)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return Coordinate(lat, lng)


def extract_coordinate(map_link: str | None) -> Coordinate | None:
    """Extract a coordinate embedded in a map-provider URL.

    Returns None when the link is empty, carries no recognised coordinate
    pair, or the pair is not a valid position.
    """
    if not map_link:
        return None
    for pattern in COORDINATE_PATTERNS:
        match = pattern.search(map_link)
        if match:
            return make_coordinate(match.group(1), match.group(2))
    return None


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def branch_coordinate(branch: Branch) -> Coordinate | None:
    """Position of a branch: map link first, then its latitude/longitude fields."""
    coordinate = extract_coordinate(branch.map_link)
    if coordinate is not None:
        return coordinate
    return make_coordinate(branch.latitude, branch.longitude)


def resolve_branches(branches: Iterable[Branch]) -> list[ResolvedBranch]:
    """Return the branches with a derivable position, in input order."""
    resolved: list[ResolvedBranch] = []
    for branch in branches:
        coordinate = branch_coordinate(branch)
        if coordinate is not None:
            resolved.append(ResolvedBranch(branch=branch, coordinate=coordinate))
    return resolved


def find_nearest_branch(user: Coordinate, branches: Iterable[Branch]) -> NearestBranch | None:
    """Return the branch closest to ``user``, or None if no branch has a position.

    When two branches are exactly equally far away the earlier one wins.
    """
    nearest: NearestBranch | None = None
    for candidate in resolve_branches(branches):
        distance = haversine_km(user, candidate.coordinate)
        if nearest is None or distance < nearest.distance_km:
            nearest = NearestBranch(
                branch=candidate.branch,
                coordinate=candidate.coordinate,
                distance_km=distance,
            )
    return nearest
