"""Where is the guest? Position sources for nearest-branch detection.

Two sources are available: a fixed position from configuration, and an IP
geolocation lookup over HTTP. Both raise a LocationError subclass when no fix
can be obtained; callers treat every variant the same way.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

import requests

from reviewbar.config import Settings
from reviewbar.geo import make_coordinate
from reviewbar.models import Coordinate

logger = logging.getLogger(__name__)


class LocationError(Exception):
    """No position fix could be obtained."""


class LocationDenied(LocationError):
    pass


class LocationTimeout(LocationError):
    pass


class LocationUnavailable(LocationError):
    pass


class Locator(Protocol):
    def current_position(self) -> Coordinate: ...


class FixedLocator:
    """Always reports the same position."""

    def __init__(self, coordinate: Coordinate) -> None:
        self.coordinate = coordinate

    def current_position(self) -> Coordinate:
        return self.coordinate


class IpLocator:
    """Approximate the position from the public IP address.

    A fix younger than ``max_age`` seconds is reused instead of asking the
    service again.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        max_age: float = 300.0,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.max_age = max_age
        self._session = session or requests.Session()
        self._clock = clock
        self._lock = threading.Lock()
        self._cached: Coordinate | None = None
        self._cached_at: float = 0.0

    def current_position(self) -> Coordinate:
        with self._lock:
            if self._cached is not None and self._clock() - self._cached_at <= self.max_age:
                return self._cached
        coordinate = self._lookup()
        with self._lock:
            self._cached = coordinate
            self._cached_at = self._clock()
        return coordinate

    def _lookup(self) -> Coordinate:
        try:
            resp = self._session.get(
                self.url,
                headers={"accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise LocationTimeout(f"location lookup timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise LocationUnavailable(f"location lookup failed: {exc}") from exc

        if resp.status_code in (401, 403, 429):
            raise LocationDenied(f"location lookup refused with HTTP {resp.status_code}")
        if not resp.ok:
            raise LocationUnavailable(f"location lookup failed with HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise LocationUnavailable("location lookup returned invalid JSON") from exc
        if not isinstance(data, dict) or data.get("error"):
            reason = data.get("reason") if isinstance(data, dict) else None
            raise LocationUnavailable(f"location lookup returned no position: {reason}")

        coordinate = make_coordinate(data.get("latitude"), data.get("longitude"))
        if coordinate is None:
            raise LocationUnavailable("location lookup returned an invalid position")
        return coordinate


def parse_position(text: str) -> Coordinate | None:
    """Parse ``"lat,lng"`` into a Coordinate."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        return None
    return make_coordinate(parts[0], parts[1])


def locator_from_settings(settings: Settings) -> Locator | None:
    """Build the configured locator, or None when detection is unsupported."""
    if not settings.LOCATE_ENABLED:
        return None
    if settings.LOCATION:
        coordinate = parse_position(settings.LOCATION)
        if coordinate is None:
            logger.warning("Ignoring invalid REVIEWBAR_LOCATION %r", settings.LOCATION)
            return None
        return FixedLocator(coordinate)
    return IpLocator(
        settings.LOCATE_URL,
        timeout=settings.LOCATE_TIMEOUT,
        max_age=settings.LOCATE_MAX_AGE,
    )
