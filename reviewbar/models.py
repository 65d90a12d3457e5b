"""Data models for REVIEWBAR."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass
class Branch:
    id: str
    name: str
    map_link: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    address: str = ""
    city: str = ""
    state: str = ""
    phone: str = ""
    working_hours: str = ""
    average_rating: float | None = None
    review_count: int = 0


@dataclass(frozen=True)
class ResolvedBranch:
    """A branch whose position could be derived."""

    branch: Branch
    coordinate: Coordinate


@dataclass(frozen=True)
class NearestBranch:
    branch: Branch
    coordinate: Coordinate
    distance_km: float


@dataclass(frozen=True)
class Resolution:
    """Outcome of nearest-branch detection as seen by the form."""

    status: str  # success | error
    branch_id: str | None = None
    branch_name: str | None = None


@dataclass
class Review:
    id: str
    overall_rating: int
    review_text: str
    visit_type: str
    created_at: str
    guest_name: str = ""
    user_name: str = ""
    table_number: str = ""
    taste_rating: int | None = None
    service_rating: int | None = None
    ambience_rating: int | None = None
    cleanliness_rating: int | None = None
    value_rating: int | None = None
    staff_reply: str = ""
    staff_reply_at: str = ""

    @property
    def author(self) -> str:
        return self.guest_name or self.user_name or "Anonymous"


@dataclass
class Dish:
    id: str
    name: str
    category: str
    price: float | None = None
    description: str = ""
    branch_name: str = ""
