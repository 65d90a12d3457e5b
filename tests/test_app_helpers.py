from rich.text import Text

from reviewbar.app import ReviewbarApp, branch_row, format_branch_rating, format_date
from reviewbar.models import Branch, Review


def test_format_date():
    assert format_date("2024-01-15T04:14:05.302Z") == "15 January 2024"
    assert format_date("2024-03-02") == "2 March 2024"
    assert format_date("yesterday") == "yesterday"
    assert format_date("") == ""


def test_format_branch_rating():
    assert format_branch_rating(Branch(id="b1", name="A", average_rating=4.26, review_count=3)) == "⭐ 4.3 (3 reviews)"
    assert format_branch_rating(Branch(id="b1", name="A")) == "⭐ N/A (0 reviews)"


def test_review_markup_escapes_and_labels():
    review = Review(
        id="r1",
        overall_rating=2,
        review_text="Too [bold]salty[/bold]",
        visit_type="DELIVERY",
        created_at="2024-01-15T04:14:05Z",
        service_rating=1,
        staff_reply="We are sorry",
    )

    markup = ReviewbarApp._review_markup(review)

    assert "Anonymous" in markup
    assert "🛵 Delivery" in markup
    assert "Delivery Time & Service: 1/5" in markup
    assert "\\[bold]" in markup
    assert "We are sorry" in markup


def test_review_markup_escapes_unknown_visit_type_and_raw_date():
    review = Review(
        id="r2",
        overall_rating=4,
        review_text="",
        visit_type="[/b]",
        created_at="[/dim] soon",
    )

    text = Text.from_markup(ReviewbarApp._review_markup(review))

    assert "[/b]" in text.plain
    assert "[/dim] soon" in text.plain


def test_branch_row_includes_map_link_as_plain_text():
    branch = Branch(
        id="b1",
        name="Perambur [Main]",
        city="Chennai",
        state="TN",
        map_link="https://maps.google.com/@13.11,80.23,15z",
    )

    cells = [cell.plain for cell in branch_row(branch)]

    assert cells[0] == "Perambur [Main]"
    assert cells[1] == "Chennai, TN"
    assert cells[-1] == "https://maps.google.com/@13.11,80.23,15z"
    assert branch_row(Branch(id="b2", name="No map"))[-1].plain == ""
