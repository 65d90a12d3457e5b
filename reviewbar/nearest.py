"""Nearest-branch detection status: idle -> loading -> success | error."""

from __future__ import annotations

import logging
from typing import Sequence

from reviewbar.geo import find_nearest_branch
from reviewbar.location import LocationError, Locator
from reviewbar.models import Branch, Resolution

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
SUCCESS = "success"
ERROR = "error"

FAILED = Resolution(status=ERROR)


def locate_nearest(locator: Locator, branches: Sequence[Branch]) -> Resolution:
    """Ask ``locator`` for a fix and pick the closest branch.

    Blocks for up to the locator's timeout. Every failure, whether the
    position or the branch data is missing, comes back as the same error
    resolution.
    """
    try:
        position = locator.current_position()
    except LocationError as exc:
        logger.info("Location unavailable: %s", exc)
        return FAILED

    nearest = find_nearest_branch(position, branches)
    if nearest is None:
        logger.info("None of %d branches has a usable position", len(branches))
        return FAILED

    logger.info(
        "Nearest branch %s (%s) at %.1f km",
        nearest.branch.name,
        nearest.branch.id,
        nearest.distance_km,
    )
    return Resolution(status=SUCCESS, branch_id=nearest.branch.id, branch_name=nearest.branch.name)


class NearestBranchLookup:
    """Tracks one detection attempt for the lifetime of a form.

    ``begin`` is called on the UI side before the blocking work starts and
    ``settle`` when it finishes. Success and error are terminal and a lookup
    that has been closed ignores late results.
    """

    def __init__(self, locator: Locator | None) -> None:
        self.locator = locator
        self.status = IDLE
        self.resolution: Resolution | None = None
        self._closed = False

    @property
    def supported(self) -> bool:
        return self.locator is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def begin(self) -> bool:
        """Move to loading. Returns False when detection should not run."""
        if self._closed or not self.supported or self.status != IDLE:
            return False
        self.status = LOADING
        return True

    def settle(self, resolution: Resolution) -> bool:
        """Record the outcome. Returns False if it arrived too late to matter."""
        if self._closed or self.status != LOADING:
            return False
        self.resolution = resolution
        self.status = SUCCESS if resolution.status == SUCCESS else ERROR
        return True

    def close(self) -> None:
        self._closed = True
