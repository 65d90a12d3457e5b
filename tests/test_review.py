import pytest

from reviewbar.review import (
    DELIVERY,
    DINE_IN,
    TAKEAWAY,
    ReviewDraft,
    ReviewValidationError,
    is_grievance,
    normalize_phone,
    question_label,
    rating_face,
)


def _valid_draft(**overrides):
    fields = dict(
        branch_id="b1",
        guest_name="Arun",
        guest_phone="9876543210",
        overall_rating=5,
    )
    fields.update(overrides)
    return ReviewDraft(**fields)


def test_valid_draft_passes():
    _valid_draft().validate()


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"branch_id": ""}, "Please select a branch"),
        ({"guest_name": "  "}, "Please provide your name"),
        ({"overall_rating": 0}, "Please provide an overall rating"),
        ({"guest_phone": ""}, "Please provide your phone number"),
        ({"guest_phone": "12345"}, "Please enter a valid 10-digit phone number"),
        ({"guest_email": "not-an-email"}, "Please enter a valid email address"),
        ({"overall_rating": 3, "review_text": "   "}, "Please describe your grievance"),
    ],
)
def test_validation_messages(overrides, message):
    with pytest.raises(ReviewValidationError, match=message):
        _valid_draft(**overrides).validate()


def test_branch_checked_before_rating():
    with pytest.raises(ReviewValidationError, match="select a branch"):
        ReviewDraft().validate()


def test_low_rating_with_text_passes():
    _valid_draft(overall_rating=1, review_text="Waited an hour").validate()


def test_grievance_threshold():
    assert not is_grievance(0)
    assert is_grievance(1)
    assert is_grievance(3)
    assert not is_grievance(4)


def test_normalize_phone():
    assert normalize_phone("+91 98765-43210") == "919876543210"
    assert normalize_phone("") == ""


def test_question_labels_follow_visit_type():
    assert question_label("service", DELIVERY) == "Delivery Time & Service"
    assert question_label("ambience", DELIVERY) == "Packaging Quality"
    assert question_label("cleanliness", DELIVERY) == "Food Hygiene"
    assert question_label("service", DINE_IN) == "Service"
    assert question_label("ambience", TAKEAWAY) == "Ambience & Atmosphere"
    assert question_label("taste", DELIVERY) == "Taste Quality"
    assert question_label("value", DINE_IN) == "Value for Money"


def test_rating_face():
    assert rating_face(1) == "😠"
    assert rating_face(5) == "😍"
    assert rating_face(None) == "⭐"


def test_payload_drops_table_number_unless_dine_in():
    draft = _valid_draft(visit_type=TAKEAWAY, table_number="T-4", details={"taste": 4})
    payload = draft.to_payload()
    assert payload["tableNumber"] == ""
    assert payload["visitType"] == TAKEAWAY
    assert payload["tasteRating"] == 4
    assert payload["serviceRating"] == 0

    assert _valid_draft(visit_type=DINE_IN, table_number=" T-4 ").to_payload()["tableNumber"] == "T-4"
