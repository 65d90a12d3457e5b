"""Client for the restaurant feedback REST API."""

from __future__ import annotations

import logging
from typing import Any

import requests

from reviewbar.config import settings
from reviewbar.models import Branch, Dish, Review
from reviewbar.review import ReviewDraft

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """The API rejected a request."""


def _url(path: str) -> str:
    return f"{settings.API_URL}{path}"


def _get_envelope(path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    resp = requests.get(_url(path), params=params, timeout=settings.API_TIMEOUT)
    resp.raise_for_status()
    envelope = resp.json()
    if not isinstance(envelope, dict):
        raise ValueError("Unexpected API response structure")
    return envelope


def _get_list(path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
    envelope = _get_envelope(path, params)
    if not envelope.get("success"):
        logger.info("GET %s returned success=false: %s", path, envelope.get("error"))
        return []
    data = envelope.get("data")
    if not isinstance(data, list):
        raise ValueError("Unexpected API response structure")
    return [item for item in data if isinstance(item, dict)]


def _optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _branch_from_json(b: dict[str, Any]) -> Branch:
    return Branch(
        id=str(b["id"]),
        name=b.get("name", ""),
        map_link=b.get("mapLink") or None,
        latitude=_optional_float(b.get("latitude")),
        longitude=_optional_float(b.get("longitude")),
        address=b.get("address") or "",
        city=b.get("city") or "",
        state=b.get("state") or "",
        phone=b.get("phone") or "",
        working_hours=b.get("workingHours") or "",
        average_rating=_optional_float(b.get("averageRating")),
        review_count=int((b.get("_count") or {}).get("reviews", 0) or 0),
    )


def _review_from_json(r: dict[str, Any]) -> Review:
    return Review(
        id=str(r["id"]),
        overall_rating=_optional_int(r.get("overallRating")) or 0,
        review_text=r.get("reviewText") or "",
        visit_type=r.get("visitType") or "",
        created_at=r.get("createdAt") or "",
        guest_name=r.get("guestName") or "",
        user_name=(r.get("user") or {}).get("name") or "",
        table_number=r.get("tableNumber") or "",
        taste_rating=_optional_int(r.get("tasteRating")),
        service_rating=_optional_int(r.get("serviceRating")),
        ambience_rating=_optional_int(r.get("ambienceRating")),
        cleanliness_rating=_optional_int(r.get("cleanlinessRating")),
        value_rating=_optional_int(r.get("valueRating")),
        staff_reply=r.get("staffReply") or "",
        staff_reply_at=r.get("staffReplyAt") or "",
    )


def _dish_from_json(d: dict[str, Any]) -> Dish:
    return Dish(
        id=str(d["id"]),
        name=d.get("name", ""),
        category=d.get("category") or "",
        price=_optional_float(d.get("price")),
        description=d.get("description") or "",
        branch_name=(d.get("branch") or {}).get("name") or "",
    )


def get_branches() -> list[Branch]:
    """Return all branches, in the order the API lists them.

    Raises:
        requests.HTTPError: On HTTP errors.
        ValueError: If the API response is unexpected.
    """
    return [_branch_from_json(b) for b in _get_list("/api/branches")]


def get_branch(branch_id: str) -> Branch | None:
    """Return a single branch, or None when the API does not know it."""
    path = f"/api/branches/{requests.utils.quote(branch_id, safe='')}"
    resp = requests.get(_url(path), timeout=settings.API_TIMEOUT)
    if resp.status_code == 404:
        return None
    resp.raise_for_status()
    envelope = resp.json()
    if not isinstance(envelope, dict) or not envelope.get("success"):
        return None
    data = envelope.get("data")
    if not isinstance(data, dict):
        raise ValueError("Unexpected API response structure")
    return _branch_from_json(data)


def get_reviews(branch_id: str | None = None, limit: int = 10) -> list[Review]:
    """Return the latest reviews, optionally for one branch."""
    params: dict[str, Any] = {"limit": limit}
    if branch_id:
        params["branchId"] = branch_id
    return [_review_from_json(r) for r in _get_list("/api/reviews", params)]


def get_menus(category: str | None = None, branch_id: str | None = None) -> list[Dish]:
    """Return menu dishes, optionally filtered by category and branch."""
    params: dict[str, Any] = {}
    if category:
        params["category"] = category
    if branch_id:
        params["branchId"] = branch_id
    return [_dish_from_json(d) for d in _get_list("/api/menus", params or None)]


def submit_review(draft: ReviewDraft) -> dict[str, Any]:
    """Post a review and return the created record.

    Raises:
        ApiError: If the API answers with an error status or ``success: false``.
        requests.RequestException: On network errors.
    """
    resp = requests.post(_url("/api/reviews"), json=draft.to_payload(), timeout=settings.API_TIMEOUT)
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    if not resp.ok or not body.get("success"):
        raise ApiError(body.get("error") or "Failed to submit review")
    return body.get("data") or {}
