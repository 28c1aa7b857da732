"""Field extractors for OCR text of shipping documents.

Every public ``extract_*`` function is pure: it takes the raw recognised
text and returns what it can identify for one order field, or ``None``.
Date-times come back as ``YYYY-MM-DDTHH:MM`` strings without a zone.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache

from .labels import MAX_LABEL_LENGTH, LabelMatch, is_reference_label, resolve_label

MAX_NOTES_LENGTH = 2000
MAX_VALUE_LINES = 2

_WEEKDAY_PREFIX = re.compile(r"^(?:mon|tue|wed|thu|fri|sat|sun)[a-z]*\.?,?\s+", re.I)
_TIME_SUFFIX = re.compile(
    r"(?:^|[\sT@])(\d{1,2})"
    r"(?::(\d{2})(?::\d{2})?\s*(?:([ap])\.?m\.?)?|\s*([ap])\.?m\.?)"
    r"(?:\s*(?:Z|UTC|[ECMP][SD]T))?$",
    re.IGNORECASE,
)
_BARE_TIME = re.compile(
    r"^(\d{1,2})(?::(\d{2}))?\s*(?:([ap])\.?m\.?)?(?:\s*(?:Z|UTC|[ECMP][SD]T))?$",
    re.IGNORECASE,
)
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_US_DATE = re.compile(r"^(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{2,4})$")
_MONTH_NAME_FORMATS = ["%b %d %Y", "%B %d %Y", "%d %b %Y", "%d %B %Y"]

_LABEL_COLON = re.compile(
    r"^(?P<label>[A-Za-z][\w\s/#&'.()\-]{0,39}?)\s*[:|]\s*(?P<value>.*)$"
)
_LABEL_DASH = re.compile(
    r"^(?P<label>[A-Za-z][\w\s/#&'.()]{0,39}?)\s+-\s+(?P<value>.+)$"
)
_LABEL_BARE = re.compile(r"^(?P<label>[A-Za-z][A-Za-z\s/#&'.()\-]{0,39}?)\s*[:\-]?$")
_COLUMNS = re.compile(r"\s{2,}")

_RANGE_SPACED = re.compile(r"\s+-\s+")
_RANGE_TO = re.compile(r"\s+(?:to|until|thru|through)\s+", re.IGNORECASE)

_WINDOW_FOR_PLACE = {"origin": "pickup_window", "destination": "delivery_window"}
# Places and equipment are never bare numbers
_NEEDS_LETTERS = frozenset({"origin", "destination", "required_truck"})
_HAS_LETTER = re.compile(r"[A-Za-z]")

TRUCK_KEYWORDS: dict[str, str] = {
    "Reefer": r"\breefer\b|\brefrigerated\b",
    "Dry Van": r"\bdry\s*van\b",
    "Flatbed": r"\bflat\s*bed\b",
    "Step Deck": r"\bstep\s*deck\b",
    "Tanker": r"\btanker\b",
    "Box Truck": r"\bbox\s*truck\b",
    "Power Only": r"\bpower\s*only\b",
    "Conestoga": r"\bconestoga\b",
    "Hotshot": r"\bhot\s*shot\b",
    "Lowboy": r"\blow\s*boy\b",
}


@dataclass(frozen=True)
class LabeledValue:
    """A value found next to a recognised label."""

    key: str
    value: str
    score: float
    line_index: int


@dataclass(frozen=True)
class Window:
    """A pickup or delivery window as read from the document.

    ``raw`` keeps the text that was found so callers can tell "no window on
    the document" apart from "a window we could not read".
    """

    start: str | None = None
    end: str | None = None
    raw: str | None = None


def clean(value: str | None) -> str:
    """Collapse runs of whitespace and trim."""
    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip()


def normalize_text(text: str | None) -> str:
    """Undo common OCR artefacts: CRs, tabs, typographic dashes, bullets."""
    return (
        (text or "")
        .replace("\r", "")
        .replace("\t", " ")
        .replace("–", "-")
        .replace("—", "-")
        .replace("•", "-")
        .replace("·", "-")
        .strip()
    )


# Date and time normalisation


def normalize_year(year: int) -> int:
    """Expand two-digit years, pivoting at 70."""
    if year < 100:
        return year + (1900 if year >= 70 else 2000)
    return year


def _to_24h(hour: int, minute: int, period: str | None) -> tuple[int, int] | None:
    if period:
        period = period.lower()
        if hour > 12:
            return None
        if period == "p" and hour < 12:
            hour += 12
        elif period == "a" and hour == 12:
            hour = 0
    if hour >= 24 or minute >= 60:
        return None
    return hour, minute


def parse_date(value: str) -> date | None:
    """Read a calendar date in ISO, US numeric, or month-name form."""
    text = _WEEKDAY_PREFIX.sub("", clean(value))
    if not text:
        return None

    try:
        match = _ISO_DATE.match(text)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return date(year, month, day)

        match = _US_DATE.match(text)
        if match:
            month, day, year = (int(g) for g in match.groups())
            return date(normalize_year(year), month, day)
    except ValueError:
        return None

    words = text.replace(",", " ").replace(".", " ")
    words = clean(words)
    for fmt in _MONTH_NAME_FORMATS:
        try:
            return datetime.strptime(words, fmt).date()
        except ValueError:
            continue
    return None


def normalize_datetime(value: str | None) -> str | None:
    """Normalise a date or date-time to ``YYYY-MM-DDTHH:MM``.

    A date without a time is taken as midnight. A bare time has no date and
    yields ``None``.
    """
    text = clean(value)
    if not text:
        return None

    hour = minute = 0
    date_part = text
    match = _TIME_SUFFIX.search(text)
    if match:
        hour_text, minute_text, period, bare_period = match.groups()
        parsed = _to_24h(int(hour_text), int(minute_text or 0), period or bare_period)
        if parsed is None:
            return None
        hour, minute = parsed
        date_part = text[: match.start()].strip()

    day = parse_date(date_part)
    if day is None:
        return None
    return f"{day.isoformat()}T{hour:02d}:{minute:02d}"


def combine_date_and_time(start: str, raw_time: str | None) -> str | None:
    """Put a bare time such as ``11:00`` or ``3pm`` on the date of ``start``."""
    match = _BARE_TIME.match(clean(raw_time))
    if not match:
        return None
    parsed = _to_24h(int(match.group(1)), int(match.group(2) or 0), match.group(3))
    if parsed is None:
        return None
    hour, minute = parsed
    return f"{start[:10]}T{hour:02d}:{minute:02d}"


def _split_range(text: str) -> tuple[str, str] | None:
    text = _RANGE_TO.sub(" - ", text)
    spaced = _RANGE_SPACED.search(text)
    if spaced:
        return text[: spaced.start()], text[spaced.end() :]

    # "2025-10-22 09:00-11:00": the separator is the first hyphen after a time
    colon = text.find(":")
    hyphen = text.find("-", colon) if colon >= 0 else -1
    if 0 < hyphen < len(text) - 1:
        return text[:hyphen], text[hyphen + 1 :]
    return None


def parse_window(value: str | None) -> tuple[str | None, str | None]:
    """Split a window value into normalised start and end.

    Args:
        value: Text such as ``10/22/2025 08:00 - 12:00`` or
            ``2025-10-22 09:00 to 2025-10-22 11:00``.

    Returns:
        ``(start, end)``; either side is ``None`` when unreadable. An end
        that is only a time borrows the start's date.
    """
    text = clean(value)
    if not text:
        return None, None

    single = normalize_datetime(text)
    if single:
        return single, None

    parts = _split_range(text)
    if parts is None:
        return None, None

    raw_start, raw_end = clean(parts[0]), clean(parts[1])
    start = normalize_datetime(raw_start)
    end = normalize_datetime(raw_end)
    if end is None and start is not None:
        end = combine_date_and_time(start, raw_end)
    return start, end


# Label scanning


def _resolve(label: str, strict: bool = False) -> LabelMatch | None:
    resolved = resolve_label(label, strict=strict)
    if resolved and resolved.key != "contact" and is_reference_label(label):
        return None
    return resolved


def detect_label(line: str) -> tuple[LabelMatch, str] | None:
    """Recognise ``Label: value``, ``Label - value``, or column layouts.

    Returns the label match and the (possibly empty) value, or ``None``
    when the line does not start with a known label.
    """
    candidates: list[tuple[str, str]] = []
    dash_at, colon_at = line.find(" - "), line.find(":")
    if 0 <= dash_at < colon_at or colon_at < 0:
        patterns = (_LABEL_DASH, _LABEL_COLON)
    else:
        patterns = (_LABEL_COLON, _LABEL_DASH)
    for pattern in patterns:
        match = pattern.match(line)
        if match:
            candidates.append((match.group("label"), match.group("value")))
    columns = _COLUMNS.split(line, maxsplit=1)
    if len(columns) == 2 and len(columns[0]) <= MAX_LABEL_LENGTH:
        candidates.append((columns[0], columns[1]))
    for label, value in candidates:
        resolved = _resolve(label)
        if resolved:
            return resolved, clean(value)

    # A label alone on its line must be an exact synonym, not a lookalike
    bare = _LABEL_BARE.match(line)
    if bare:
        resolved = _resolve(bare.group("label"), strict=True)
        if resolved:
            return resolved, ""
    return None


def _collect_following(lines: list[str], start: int, limit: int) -> tuple[str, int]:
    """Gather value lines after a bare label, stopping at the next label."""
    values: list[str] = []
    cursor = start
    while cursor < len(lines) and len(values) < limit:
        line = lines[cursor]
        if not line:
            if values:
                break
            cursor += 1
            continue
        if detect_label(line):
            break
        values.append(clean(line))
        cursor += 1
    return ", ".join(values), cursor


def _collect_block(lines: list[str], start: int, first: str) -> tuple[str, int]:
    """Gather a free-text block (notes) up to the next labelled line."""
    block = [first] if first else []
    cursor = start
    while cursor < len(lines):
        line = lines[cursor]
        if line and detect_label(line):
            break
        if line:
            block.append(clean(line))
        cursor += 1
        if sum(len(part) for part in block) > MAX_NOTES_LENGTH:
            break
    return "\n".join(block), cursor


@lru_cache(maxsize=64)
def scan_labels(text: str) -> tuple[LabeledValue, ...]:
    """Find every labelled value in the document, in reading order."""
    lines = [line.strip() for line in normalize_text(text).split("\n")]
    found: list[LabeledValue] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        detected = detect_label(line) if line else None
        if detected is None:
            index += 1
            continue

        match, value = detected
        key = match.key
        next_index = index + 1
        if key == "notes":
            value, next_index = _collect_block(lines, next_index, value)
        elif not value:
            value, next_index = _collect_following(lines, next_index, MAX_VALUE_LINES)

        if key in _WINDOW_FOR_PLACE and parse_window(value)[0] is not None:
            # "Pickup: 10/22/2025 08:00" names a time, not a place
            key = _WINDOW_FOR_PLACE[key]

        if key in _NEEDS_LETTERS and not _HAS_LETTER.search(value):
            value = ""

        if value:
            found.append(LabeledValue(key, value, match.score, index))
        index = next_index
    return tuple(found)


def _best(text: str, key: str) -> str | None:
    """Highest scoring value for ``key``; the earliest one on ties."""
    best: LabeledValue | None = None
    for item in scan_labels(text):
        if item.key == key and (best is None or item.score > best.score):
            best = item
    return best.value if best else None


# Field extractors


def extract_customer(text: str) -> str | None:
    return _best(text, "customer")


def extract_origin(text: str) -> str | None:
    return _best(text, "origin")


def extract_destination(text: str) -> str | None:
    return _best(text, "destination")


def extract_contact(text: str) -> str | None:
    return _best(text, "contact")


def extract_notes(text: str) -> str | None:
    """Labelled notes, comments, or instructions, capped at 2000 characters."""
    notes = _best(text, "notes")
    if notes is None:
        return None
    return notes[:MAX_NOTES_LENGTH]


def extract_required_truck(text: str) -> str | None:
    """Equipment type from its label, else from an unambiguous keyword.

    When the keywords point at more than one equipment type the document is
    ambiguous and nothing is returned.
    """
    labelled = _best(text, "required_truck")
    if labelled:
        return labelled

    lowered = normalize_text(text).lower()
    hits = [
        name for name, pattern in TRUCK_KEYWORDS.items() if re.search(pattern, lowered)
    ]
    if len(hits) == 1:
        return hits[0]
    return None


def _extract_window(text: str, window_key: str, start_key: str, end_key: str) -> Window:
    window_raw = _best(text, window_key)
    start_raw = _best(text, start_key)
    end_raw = _best(text, end_key)

    start, end = parse_window(window_raw)
    if start is None:
        start = normalize_datetime(start_raw)
    if end is None and end_raw:
        end = normalize_datetime(end_raw)
        if end is None and start is not None:
            end = combine_date_and_time(start, end_raw)

    raw = " | ".join(part for part in (window_raw, start_raw, end_raw) if part)
    return Window(start=start, end=end, raw=raw or None)


def extract_pickup_window(text: str) -> Window:
    return _extract_window(text, "pickup_window", "pickup_start", "pickup_end")


def extract_delivery_window(text: str) -> Window:
    return _extract_window(text, "delivery_window", "delivery_start", "delivery_end")
