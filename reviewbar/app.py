"""REVIEWBAR – Textual TUI for restaurant customer feedback."""

from __future__ import annotations

import logging
from datetime import datetime

from rich.markup import escape
from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    LoadingIndicator,
    Select,
    Static,
    TabbedContent,
    TabPane,
    TextArea,
)

from reviewbar import api, prefs
from reviewbar.catalog import CATEGORIES, category_label, group_by_category
from reviewbar.config import settings
from reviewbar.location import locator_from_settings
from reviewbar.models import Branch, Dish, Resolution, Review
from reviewbar.nearest import ERROR, IDLE, LOADING, SUCCESS, NearestBranchLookup, locate_nearest
from reviewbar.review import (
    DELIVERY,
    DETAIL_RATINGS,
    DINE_IN,
    RATING_FACES,
    TAKEAWAY,
    VISIT_TYPE_LABELS,
    ReviewDraft,
    ReviewValidationError,
    is_grievance,
    question_label,
    rating_face,
)

logger = logging.getLogger(__name__)

_RATING_OPTIONS: list[tuple[str, int]] = [
    (f"{face} {label}", value) for value, (face, label) in RATING_FACES.items()
]
_DINE_MODE_OPTIONS: list[tuple[str, str]] = [
    (VISIT_TYPE_LABELS[DINE_IN], DINE_IN),
    (VISIT_TYPE_LABELS[TAKEAWAY], TAKEAWAY),
]
_CATEGORY_OPTIONS: list[tuple[str, str]] = [(category_label(c), c) for c in CATEGORIES]
_BRANCH_REVIEWS_LIMIT = 50
_REVIEWS_PLACEHOLDER = "Select a branch on the [b]Branches[/b] tab to read its reviews."


def format_date(value: str) -> str:
    """Format an API timestamp for display:

        "2024-01-15T04:14:05.302Z" → "15 January 2024"
        anything unparseable      → unchanged
    """
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{parsed.day} {parsed.strftime('%B %Y')}"


def format_branch_rating(branch: Branch) -> str:
    rating = f"{branch.average_rating:.1f}" if branch.average_rating is not None else "N/A"
    return f"⭐ {rating} ({branch.review_count} reviews)"


def branch_row(branch: Branch) -> tuple[Text, ...]:
    """Cells for the branch directory table, kept as plain text."""
    cells = (
        branch.name,
        ", ".join(p for p in (branch.city, branch.state) if p),
        branch.address,
        branch.phone,
        branch.working_hours,
        format_branch_rating(branch),
        branch.map_link or "",
    )
    return tuple(Text(cell) for cell in cells)


class VisitTypeScreen(ModalScreen[str]):
    """Ask how the guest ordered before showing the form."""

    def compose(self) -> ComposeResult:
        with Vertical(id="visit-dialog"):
            yield Label("How did you order?", id="visit-title")
            yield Static("Please select your order type to help us ask the right questions.")
            yield Button("🍽️  Dine in – eating at the restaurant", id="visit-dine-in", variant="primary")
            yield Button("🛵  Online Delivery – Swiggy, Zomato, or Direct", id="visit-delivery")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(DELIVERY if event.button.id == "visit-delivery" else DINE_IN)


class ReviewbarApp(App[None]):
    """REVIEWBAR – feedback form, branch directory and menu."""

    TITLE = "REVIEWBAR"
    SUB_TITLE = "Restaurant Feedback"
    CSS_PATH = "app.tcss"
    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+s", "submit", "Submit Review", show=True),
        Binding("ctrl+t", "change_visit_type", "Order Type", show=True),
        Binding("ctrl+x", "clear", "Clear", show=True),
    ]

    locate_state: reactive[str] = reactive(IDLE, init=False)  # idle | loading | success | error

    def __init__(self, lookup: NearestBranchLookup | None = None) -> None:
        super().__init__()
        self._branches: list[Branch] = []
        self._visit_type = TAKEAWAY
        self._lookup = lookup or NearestBranchLookup(locator_from_settings(settings))
        self._nearest_name = ""
        self._auto_selected_id: str | None = None
        self._reviews_branch_id: str | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with TabbedContent(initial="feedback-tab"):
            # ── Feedback form ──────────────────────────────────────────
            with TabPane("Feedback", id="feedback-tab"):
                with VerticalScroll(id="feedback-form"):
                    with Horizontal(id="visit-row"):
                        yield Label("", id="visit-label")
                        yield Button("Change", id="change-visit-btn", compact=True)
                    yield Select(
                        _DINE_MODE_OPTIONS,
                        id="dine-mode-select",
                        allow_blank=False,
                        value=TAKEAWAY,
                        compact=True,
                    )

                    yield Label("👤 Your Details", classes="section")
                    yield Input(placeholder="Name *", id="guest-name")
                    yield Input(
                        placeholder="10-digit mobile number *",
                        id="guest-phone",
                        restrict=r"[0-9]*",
                        max_length=10,
                    )
                    yield Input(placeholder="Email", id="guest-email")

                    with Horizontal(id="branch-row"):
                        yield Label("Select Branch *")
                        yield Static("", id="locate-hint")
                    yield Select(
                        [],
                        prompt="Choose a branch...",
                        id="branch-select",
                        allow_blank=True,
                        compact=True,
                    )
                    yield Input(placeholder="Table number (e.g. T-12)", id="table-number")

                    yield Label("Overall Rating *", classes="section")
                    yield Select(
                        _RATING_OPTIONS,
                        prompt="How was it?",
                        id="rating-overall",
                        allow_blank=True,
                        compact=True,
                    )

                    yield Label("Detailed Ratings (Optional)", classes="section")
                    for key in DETAIL_RATINGS:
                        with Horizontal(classes="detail-row"):
                            yield Label(question_label(key, TAKEAWAY), id=f"label-{key}")
                            yield Select(
                                _RATING_OPTIONS,
                                prompt="–",
                                id=f"rating-{key}",
                                allow_blank=True,
                                compact=True,
                            )

                    yield Label("Your Review (Optional)", id="review-text-label", classes="section")
                    yield TextArea(id="review-text")

                    with Horizontal(id="form-buttons"):
                        yield Button("Submit Review", id="submit-btn", variant="success")
                        yield Button("Clear", id="clear-btn")

            # ── Branch directory ───────────────────────────────────────
            with TabPane("Branches", id="branches-tab"):
                with Vertical(id="branches-area"):
                    yield LoadingIndicator()

            # ── Branch reviews ─────────────────────────────────────────
            with TabPane("Reviews", id="reviews-tab"):
                with Horizontal(id="reviews-toolbar"):
                    yield Button("← Back to Branches", id="back-to-branches-btn", compact=True)
                    yield Button("Write a Review", id="write-review-btn", variant="success", compact=True)
                with VerticalScroll(id="reviews-area"):
                    yield Static(_REVIEWS_PLACEHOLDER, classes="empty-state")

            # ── Menu ───────────────────────────────────────────────────
            with TabPane("Menu", id="menu-tab"):
                yield Select(
                    _CATEGORY_OPTIONS,
                    prompt="All",
                    id="category-select",
                    allow_blank=True,
                    compact=True,
                )
                with VerticalScroll(id="menu-area"):
                    yield LoadingIndicator()

        yield Footer()

    # ── Lifecycle ──────────────────────────────────────────────────────

    def on_mount(self) -> None:
        stored = prefs.load_visit_type()
        if stored:
            self._apply_visit_type(stored)
        else:
            self._apply_visit_type(TAKEAWAY)
            self.push_screen(VisitTypeScreen(), self._visit_type_chosen)
        self._fetch_branches()
        self._fetch_menu(None)

    def on_unmount(self) -> None:
        self._lookup.close()

    # ── Actions ────────────────────────────────────────────────────────

    def action_submit(self) -> None:
        self.query_one("#submit-btn", Button).press()

    def action_clear(self) -> None:
        self.query_one("#clear-btn", Button).press()

    def action_change_visit_type(self) -> None:
        self.push_screen(VisitTypeScreen(), self._visit_type_chosen)

    # ── Event handlers ─────────────────────────────────────────────────

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "submit-btn":
            self._do_submit()
        elif button_id == "clear-btn":
            self._reset_form()
        elif button_id == "change-visit-btn":
            self.action_change_visit_type()
        elif button_id == "back-to-branches-btn":
            self.query_one(TabbedContent).active = "branches-tab"
        elif button_id == "write-review-btn":
            self._write_review_for(self._reviews_branch_id)

    def on_select_changed(self, event: Select.Changed) -> None:
        select_id = event.select.id
        value = None if event.value is Select.NULL else event.value
        if select_id == "branch-select":
            if value != self._auto_selected_id and self._nearest_name:
                # Manual choice replaces the detected branch.
                self._nearest_name = ""
                self._refresh_locate_hint()
        elif select_id == "dine-mode-select":
            if value and value != self._visit_type:
                self._apply_visit_type(str(value))
        elif select_id == "rating-overall":
            self._refresh_review_text_label(int(value) if value else 0)
        elif select_id == "category-select":
            self._fetch_menu(str(value) if value else None)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.data_table.has_class("branches-table") and event.row_key.value:
            self._open_branch_reviews(event.row_key.value)

    def watch_locate_state(self, state: str) -> None:
        self._refresh_locate_hint()

    # ── Visit type ─────────────────────────────────────────────────────

    def _visit_type_chosen(self, visit_type: str | None) -> None:
        if not visit_type:
            return
        try:
            prefs.save_visit_type(visit_type)
        except OSError as exc:
            logger.warning("Could not store visit type preference: %s", exc)
        self._apply_visit_type(visit_type)

    def _apply_visit_type(self, visit_type: str) -> None:
        self._visit_type = visit_type
        is_delivery = visit_type == DELIVERY
        self.query_one("#visit-label", Label).update(
            "🛵 Delivery" if is_delivery else "🍽️ Dine-in / Takeaway"
        )
        dine_mode = self.query_one("#dine-mode-select", Select)
        dine_mode.display = not is_delivery
        if not is_delivery and dine_mode.value != visit_type:
            dine_mode.value = visit_type
        self.query_one("#table-number", Input).display = visit_type == DINE_IN
        for key in DETAIL_RATINGS:
            self.query_one(f"#label-{key}", Label).update(question_label(key, visit_type))

    # ── Form helpers ───────────────────────────────────────────────────

    def _selected(self, selector: str) -> str | None:
        sel = self.query_one(selector, Select)
        if sel.value is Select.NULL:
            return None
        return str(sel.value)

    def _rating(self, selector: str) -> int:
        value = self._selected(selector)
        return int(value) if value else 0

    def _build_draft(self) -> ReviewDraft:
        details = {}
        for key in DETAIL_RATINGS:
            rating = self._rating(f"#rating-{key}")
            if rating:
                details[key] = rating
        return ReviewDraft(
            branch_id=self._selected("#branch-select") or "",
            guest_name=self.query_one("#guest-name", Input).value,
            guest_phone=self.query_one("#guest-phone", Input).value,
            guest_email=self.query_one("#guest-email", Input).value,
            visit_type=self._visit_type,
            table_number=self.query_one("#table-number", Input).value,
            overall_rating=self._rating("#rating-overall"),
            details=details,
            review_text=self.query_one("#review-text", TextArea).text,
        )

    def _refresh_review_text_label(self, overall_rating: int) -> None:
        grievance = is_grievance(overall_rating)
        self.query_one("#review-text-label", Label).update(
            "What went wrong? (Required) *" if grievance else "Your Review (Optional)"
        )
        self.query_one("#review-text", TextArea).set_class(grievance, "grievance")

    def _reset_form(self) -> None:
        for input_id in ("#guest-name", "#guest-phone", "#guest-email", "#table-number"):
            self.query_one(input_id, Input).value = ""
        for select_id in ["#branch-select", "#rating-overall"] + [f"#rating-{k}" for k in DETAIL_RATINGS]:
            self.query_one(select_id, Select).clear()
        self.query_one("#review-text", TextArea).load_text("")
        self._nearest_name = ""
        self._refresh_review_text_label(0)
        self._refresh_locate_hint()

    def _write_review_for(self, branch_id: str | None) -> None:
        if branch_id and any(b.id == branch_id for b in self._branches):
            self.query_one("#branch-select", Select).value = branch_id
        self.query_one(TabbedContent).active = "feedback-tab"

    # ── Submission ─────────────────────────────────────────────────────

    def _do_submit(self) -> None:
        draft = self._build_draft()
        try:
            draft.validate()
        except ReviewValidationError as exc:
            self.notify(f"⚠️  {escape(str(exc))}", severity="error")
            return
        button = self.query_one("#submit-btn", Button)
        button.disabled = True
        button.label = "Submitting..."
        self._submit_review(draft)

    @work(thread=True, exclusive=True, group="submit")
    def _submit_review(self, draft: ReviewDraft) -> None:
        try:
            api.submit_review(draft)
        except Exception as exc:  # noqa: BLE001
            self.call_from_thread(
                self._submit_finished,
                str(exc) or "An error occurred. Please try again.",
            )
        else:
            self.call_from_thread(self._submit_finished, None)

    def _submit_finished(self, error: str | None) -> None:
        button = self.query_one("#submit-btn", Button)
        button.disabled = False
        button.label = "Submit Review"
        if error:
            self.notify(f"⚠️  {escape(error)}", severity="error")
            return
        self.notify("✅ Review Submitted! Thank you for sharing your experience with us! 🙏", timeout=5)
        self._reset_form()

    # ── Branches & nearest-branch detection ────────────────────────────

    @work(thread=True, group="branches")
    def _fetch_branches(self) -> None:
        try:
            branches = api.get_branches()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to fetch branches: %s", exc)
            self.call_from_thread(self._show_branches_error, f"Failed to fetch branches: {exc}")
            return
        self.call_from_thread(self._branches_loaded, branches)

    def _branches_loaded(self, branches: list[Branch]) -> None:
        self._branches = branches
        self.query_one("#branch-select", Select).set_options([(b.name, b.id) for b in branches])
        self._render_branches(branches)
        if self._lookup.begin():
            self.locate_state = LOADING
            self._locate_nearest(branches)

    @work(thread=True, group="locate")
    def _locate_nearest(self, branches: list[Branch]) -> None:
        resolution = locate_nearest(self._lookup.locator, branches)
        if self._lookup.closed:
            return
        self.call_from_thread(self._location_settled, resolution)

    def _location_settled(self, resolution: Resolution) -> None:
        if not self._lookup.settle(resolution):
            return
        if resolution.status == SUCCESS:
            branch_select = self.query_one("#branch-select", Select)
            if branch_select.value is Select.NULL:
                self._auto_selected_id = resolution.branch_id
                self._nearest_name = resolution.branch_name or ""
                branch_select.value = resolution.branch_id
        self.locate_state = self._lookup.status

    def _refresh_locate_hint(self) -> None:
        hint = self.query_one("#locate-hint", Static)
        state = self.locate_state
        if state == LOADING:
            hint.update("📍 Detecting location...")
        elif state == SUCCESS and self._nearest_name:
            hint.update(f"✅ Nearest: {escape(self._nearest_name)}")
        elif state == ERROR:
            hint.update("📍 Unable to detect location. Please select manually.")
        else:
            hint.update("")
        hint.set_class(state == SUCCESS and bool(self._nearest_name), "-found")
        hint.set_class(state == ERROR, "-unavailable")

    def _render_branches(self, branches: list[Branch]) -> None:
        area = self.query_one("#branches-area")
        area.remove_children()
        if not branches:
            area.mount(Static("No branches found.", classes="empty-state"))
            return
        table = DataTable(classes="branches-table", zebra_stripes=True, cursor_type="row")
        area.mount(table)
        table.add_columns("Branch", "City", "Address", "Phone", "Hours", "Rating", "Map")
        for b in branches:
            table.add_row(*branch_row(b), key=b.id)

    def _show_branches_error(self, message: str) -> None:
        area = self.query_one("#branches-area")
        area.remove_children()
        area.mount(Static(f"⚠️  {escape(message)}", classes="error-state"))

    # ── Branch reviews ─────────────────────────────────────────────────

    def _open_branch_reviews(self, branch_id: str) -> None:
        self._reviews_branch_id = branch_id
        self.query_one(TabbedContent).active = "reviews-tab"
        area = self.query_one("#reviews-area")
        area.remove_children()
        area.mount(LoadingIndicator())
        self._fetch_reviews(branch_id)

    @work(thread=True, exclusive=True, group="reviews")
    def _fetch_reviews(self, branch_id: str) -> None:
        try:
            branch = api.get_branch(branch_id)
            reviews = api.get_reviews(branch_id, limit=_BRANCH_REVIEWS_LIMIT)
        except Exception as exc:  # noqa: BLE001
            self.call_from_thread(self._show_reviews_message, f"⚠️  Failed to fetch reviews: {escape(str(exc))}")
            return
        self.call_from_thread(self._render_reviews, branch, reviews)

    def _show_reviews_message(self, message: str) -> None:
        area = self.query_one("#reviews-area")
        area.remove_children()
        area.mount(Static(message, classes="empty-state"))

    def _render_reviews(self, branch: Branch | None, reviews: list[Review]) -> None:
        if branch is None:
            self._show_reviews_message("Branch not found.")
            return
        area = self.query_one("#reviews-area")
        area.remove_children()
        location = ", ".join(p for p in (branch.address, branch.city, branch.state) if p)
        area.mount(Static(f"[b]{escape(branch.name)}[/b]\n{escape(location)}", classes="reviews-header"))
        if not reviews:
            area.mount(Static("No reviews yet. Be the first to review!", classes="review-card"))
            return
        for review in reviews:
            area.mount(Static(self._review_markup(review), classes="review-card"))

    @staticmethod
    def _review_markup(review: Review) -> str:
        visit = VISIT_TYPE_LABELS.get(review.visit_type) or escape(review.visit_type)
        meta = escape(format_date(review.created_at))
        if review.table_number:
            meta += f" • Table: {escape(review.table_number)}"
        lines = [
            f"[b]{escape(review.author)}[/b]  {visit}  {rating_face(review.overall_rating)}",
            f"[dim]{meta}[/dim]",
        ]
        details = [
            f"{question_label(key, review.visit_type)}: {rating}/5"
            for key, rating in (
                ("taste", review.taste_rating),
                ("service", review.service_rating),
                ("ambience", review.ambience_rating),
                ("cleanliness", review.cleanliness_rating),
                ("value", review.value_rating),
            )
            if rating
        ]
        if details:
            lines.append(" · ".join(details))
        if review.review_text:
            lines.append(escape(review.review_text))
        if review.staff_reply:
            replied = format_date(review.staff_reply_at)
            suffix = f" ({replied})" if replied else ""
            lines.append(f"[green]Response from the restaurant{suffix}:[/green] {escape(review.staff_reply)}")
        return "\n".join(lines)

    # ── Menu ───────────────────────────────────────────────────────────

    @work(thread=True, exclusive=True, group="menu")
    def _fetch_menu(self, category: str | None) -> None:
        try:
            dishes = api.get_menus(category)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to load menu: %s", exc)
            self.call_from_thread(self._render_menu, [], f"⚠️  Failed to load menu: {escape(str(exc))}")
            return
        self.call_from_thread(self._render_menu, dishes, None)

    def _render_menu(self, dishes: list[Dish], error: str | None) -> None:
        area = self.query_one("#menu-area")
        area.remove_children()
        if error:
            area.mount(Static(error, classes="error-state"))
            return
        if not dishes:
            area.mount(Static("No items found in this category.", classes="empty-state"))
            return
        for category, items in group_by_category(dishes).items():
            area.mount(Label(category_label(category), classes="menu-category"))
            lines = []
            for dish in items:
                price = f"₹{dish.price:g}" if dish.price is not None else ""
                line = f"[b]{escape(dish.name)}[/b]  {price}"
                if dish.description:
                    line += f"\n  [dim]{escape(dish.description)}[/dim]"
                if dish.branch_name:
                    line += f"\n  📍 {escape(dish.branch_name)}"
                lines.append(line)
            area.mount(Static("\n".join(lines), classes="menu-items"))
