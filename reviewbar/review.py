"""Review form state and client-side validation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

DINE_IN = "DINE_IN"
TAKEAWAY = "TAKEAWAY"
DELIVERY = "DELIVERY"

VISIT_TYPES: tuple[str, ...] = (DINE_IN, TAKEAWAY, DELIVERY)
VISIT_TYPE_LABELS: dict[str, str] = {
    DINE_IN: "🍽️ Dine-in",
    TAKEAWAY: "🥡 Takeaway",
    DELIVERY: "🛵 Delivery",
}

RATING_FACES: dict[int, tuple[str, str]] = {
    1: ("😠", "Angry"),
    2: ("☹️", "Sad"),
    3: ("😐", "OK"),
    4: ("🙂", "Good"),
    5: ("😍", "Love it"),
}

# Detailed ratings in the order the form asks for them.
DETAIL_RATINGS: tuple[str, ...] = ("service", "taste", "ambience", "cleanliness", "value")

_DELIVERY_LABELS = {
    "service": "Delivery Time & Service",
    "ambience": "Packaging Quality",
    "cleanliness": "Food Hygiene",
}
_VISIT_LABELS = {
    "service": "Service",
    "ambience": "Ambience & Atmosphere",
    "cleanliness": "Cleanliness",
    "taste": "Taste Quality",
    "value": "Value for Money",
}

PHONE_DIGITS = 10
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ReviewValidationError(ValueError):
    """The draft cannot be submitted; the message is shown to the guest."""


def question_label(key: str, visit_type: str) -> str:
    """Label for a detailed rating question, worded for the visit type."""
    if visit_type == DELIVERY and key in _DELIVERY_LABELS:
        return _DELIVERY_LABELS[key]
    return _VISIT_LABELS.get(key, key.capitalize())


def rating_face(rating: int | None) -> str:
    if rating in RATING_FACES:
        return RATING_FACES[rating][0]
    return "⭐"


def normalize_phone(raw: str) -> str:
    """Keep only the digits of a phone number."""
    return re.sub(r"\D", "", raw or "")


def is_grievance(overall_rating: int) -> bool:
    """Ratings of 1-3 require the guest to describe what went wrong."""
    return 0 < overall_rating <= 3


@dataclass
class ReviewDraft:
    branch_id: str = ""
    guest_name: str = ""
    guest_phone: str = ""
    guest_email: str = ""
    visit_type: str = TAKEAWAY
    table_number: str = ""
    overall_rating: int = 0
    details: dict[str, int] = field(default_factory=dict)
    review_text: str = ""

    def validate(self) -> None:
        """Raise ReviewValidationError with the first problem found."""
        if not self.branch_id:
            raise ReviewValidationError("Please select a branch")
        if not self.guest_name.strip():
            raise ReviewValidationError("Please provide your name")
        if self.overall_rating == 0:
            raise ReviewValidationError("Please provide an overall rating")
        phone = normalize_phone(self.guest_phone)
        if not phone:
            raise ReviewValidationError("Please provide your phone number")
        if len(phone) != PHONE_DIGITS:
            raise ReviewValidationError("Please enter a valid 10-digit phone number")
        if self.guest_email.strip() and not _EMAIL_RE.match(self.guest_email.strip()):
            raise ReviewValidationError("Please enter a valid email address")
        if is_grievance(self.overall_rating) and not self.review_text.strip():
            raise ReviewValidationError(
                "Please describe your grievance (required for 1-3 star ratings)"
            )

    def to_payload(self) -> dict[str, Any]:
        """JSON body for ``POST /api/reviews``."""
        payload: dict[str, Any] = {
            "branchId": self.branch_id,
            "guestName": self.guest_name.strip(),
            "guestEmail": self.guest_email.strip(),
            "guestPhone": normalize_phone(self.guest_phone),
            "overallRating": self.overall_rating,
            "visitType": self.visit_type,
            "reviewText": self.review_text.strip(),
            "tableNumber": self.table_number.strip() if self.visit_type == DINE_IN else "",
        }
        for key in DETAIL_RATINGS:
            payload[f"{key}Rating"] = self.details.get(key, 0)
        return payload
