"""Best-effort order drafting from OCR text.

Composes the field extractors into an :class:`OrderDraft`. The parser never
raises: partial or empty drafts are normal, and anything it could see but
not trust is reported in ``warnings`` rather than guessed.
"""

from dataclasses import asdict, dataclass, field

from fleetops.utils.logger import get_logger

from .fields import (
    MAX_NOTES_LENGTH,
    Window,
    extract_contact,
    extract_customer,
    extract_delivery_window,
    extract_destination,
    extract_notes,
    extract_origin,
    extract_pickup_window,
    extract_required_truck,
)

logger = get_logger(__name__)

SUCCESS_THRESHOLD = 0.85
WARNING_THRESHOLD = 0.6

_MAX_LENGTHS = {
    "customer": 255,
    "origin": 255,
    "destination": 255,
    "required_truck": 120,
}


@dataclass
class OrderDraft:
    """An unvalidated order awaiting human confirmation.

    Every field is optional; window values are ``YYYY-MM-DDTHH:MM`` strings.
    """

    customer: str | None = None
    origin: str | None = None
    destination: str | None = None
    pu_window_start: str | None = None
    pu_window_end: str | None = None
    del_window_start: str | None = None
    del_window_end: str | None = None
    required_truck: str | None = None
    notes: str | None = None
    warnings: list[str] = field(default_factory=list)

    def fields(self) -> dict[str, str | None]:
        """Draft fields without the warnings."""
        data = asdict(self)
        data.pop("warnings")
        return data

    def is_empty(self) -> bool:
        return all(value is None for value in self.fields().values())


def confidence_to_badge(score: float | None) -> str:
    """Map an OCR confidence in [0, 1] to a presentation band.

    Returns:
        ``"success"`` at or above 0.85, ``"warning"`` below 0.6, and
        ``"default"`` otherwise or when no score is available.
    """
    if score is None or isinstance(score, bool):
        return "default"
    if score >= SUCCESS_THRESHOLD:
        return "success"
    if score < WARNING_THRESHOLD:
        return "warning"
    return "default"


def format_confidence(score: float | None) -> str:
    if score is None:
        return "—"
    return f"{round(score * 100)}%"


def _apply_window(draft: OrderDraft, window: Window, name: str, prefix: str) -> None:
    start, end = window.start, window.end
    if window.raw and start is None and end is None:
        draft.warnings.append(f"{name} window: could not read '{window.raw}'")
        return
    if start and end and end < start:
        draft.warnings.append(f"{name} window: end {end} is before start {start}")
        end = None
    setattr(draft, f"{prefix}_window_start", start)
    setattr(draft, f"{prefix}_window_end", end)


def _bounded(draft: OrderDraft, name: str, value: str | None) -> str | None:
    limit = _MAX_LENGTHS[name]
    if value and len(value) > limit:
        draft.warnings.append(f"{name}: longer than {limit} characters, dropped")
        return None
    return value


def parse_ocr_to_order(text: str | None) -> OrderDraft:
    """Extract a draft order from raw recognised text.

    Args:
        text: OCR output for one document. May be empty or ``None``.

    Returns:
        OrderDraft with whatever fields could be identified.
    """
    draft = OrderDraft()
    if not text or not text.strip():
        return draft

    draft.customer = _bounded(draft, "customer", extract_customer(text))
    draft.origin = _bounded(draft, "origin", extract_origin(text))
    draft.destination = _bounded(draft, "destination", extract_destination(text))
    draft.required_truck = _bounded(
        draft, "required_truck", extract_required_truck(text)
    )
    _apply_window(draft, extract_pickup_window(text), "pickup", "pu")
    _apply_window(draft, extract_delivery_window(text), "delivery", "del")

    notes = extract_notes(text)
    contact = extract_contact(text)
    if contact:
        contact_line = f"Contact: {contact}"
        notes = f"{notes}\n{contact_line}" if notes else contact_line
    draft.notes = notes[:MAX_NOTES_LENGTH] if notes else None

    found = sum(value is not None for value in draft.fields().values())
    logger.info(
        "Parsed order draft: %d fields, %d warnings", found, len(draft.warnings)
    )
    return draft
