"""Label vocabulary for shipping documents.

Maps the many ways a rate confirmation or bill of lading spells a field
label onto the canonical draft fields, tolerating small OCR misreads.
"""

import re
from dataclasses import dataclass

LABEL_SYNONYMS: dict[str, list[str]] = {
    "customer": ["customer", "client", "consignee", "bill to", "broker"],
    "origin": [
        "origin",
        "shipper",
        "pickup",
        "pick up",
        "pickup address",
        "pickup location",
        "pu address",
        "pu origin",
    ],
    "destination": [
        "destination",
        "receiver",
        "delivery",
        "delivery address",
        "delivery location",
        "del address",
    ],
    "pickup_window": [
        "pickup window",
        "pickup time",
        "pickup date",
        "pickup availability",
        "pu window",
        "pu time",
        "pu date",
    ],
    "pickup_start": [
        "pickup start",
        "pickup open",
        "pickup from",
        "pickup window start",
        "pu start",
        "pu window start",
    ],
    "pickup_end": [
        "pickup end",
        "pickup close",
        "pickup by",
        "pickup window end",
        "pu end",
        "pu window end",
    ],
    "delivery_window": [
        "delivery window",
        "delivery time",
        "delivery date",
        "delivery availability",
        "del window",
        "del time",
        "del date",
    ],
    "delivery_start": [
        "delivery start",
        "delivery open",
        "delivery from",
        "delivery window start",
        "del start",
        "del window start",
    ],
    "delivery_end": [
        "delivery end",
        "delivery close",
        "delivery by",
        "delivery window end",
        "del end",
        "del window end",
    ],
    "required_truck": [
        "required truck",
        "req truck",
        "truck type",
        "equipment",
        "equipment type",
        "trailer",
        "trailer type",
    ],
    "notes": ["notes", "note", "comments", "instructions", "special instructions"],
    "contact": ["contact", "dispatcher", "phone"],
}

FUZZY_THRESHOLD = 0.8
MAX_LABEL_LENGTH = 40
_CANONICAL_SCORE = 1.0
_SYNONYM_SCORE = 0.92
_PREFIX_SCORE = 0.85

# "Pickup #", "Trailer No.", "Delivery Ref" name a reference number, not the field
_REFERENCE_MARKER = re.compile(r"#|\b(?:no|num|number|ref|po)\b", re.IGNORECASE)


@dataclass(frozen=True)
class LabelMatch:
    """A recognised label and how sure we are about it."""

    key: str
    score: float


def normalize_label(value: str) -> str:
    """Lowercase and collapse everything but letters and digits to spaces."""
    return re.sub(r"[^a-z0-9]+", " ", value.lower()).strip()


def is_reference_label(label: str) -> bool:
    return bool(_REFERENCE_MARKER.search(label))


def levenshtein_ratio(a: str, b: str) -> float:
    """Similarity in [0, 1] derived from edit distance."""
    if a == b:
        return 1.0
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
            )
        previous = current
    return 1.0 - previous[-1] / max(len(a), len(b), 1)


def _build_index() -> dict[str, LabelMatch]:
    index: dict[str, LabelMatch] = {}
    for key, synonyms in LABEL_SYNONYMS.items():
        for position, synonym in enumerate(synonyms):
            score = _CANONICAL_SCORE if position == 0 else _SYNONYM_SCORE
            index.setdefault(normalize_label(synonym), LabelMatch(key, score))
    return index


_INDEX = _build_index()
# Longest first so "pickup window start" beats "pickup window" beats "pickup".
_BY_LENGTH = sorted(_INDEX, key=len, reverse=True)


def resolve_label(label: str, strict: bool = False) -> LabelMatch | None:
    """Resolve a raw label to its canonical field.

    Lookup order: exact synonym, longest synonym the label starts with
    (``Origin City`` → origin), then the closest synonym with a Levenshtein
    ratio of at least 0.8 (``Cust0mer`` → customer).

    Args:
        label: Label text as it appeared before the separator.
        strict: Accept exact synonyms only.

    Returns:
        The match with a score in (0, 1], or ``None`` when nothing fits.
    """
    normalized = normalize_label(label)
    if not normalized:
        return None

    direct = _INDEX.get(normalized)
    if direct or strict:
        return direct

    for synonym in _BY_LENGTH:
        if normalized.startswith(synonym + " "):
            return LabelMatch(_INDEX[synonym].key, _PREFIX_SCORE)

    best_key: str | None = None
    best_ratio = 0.0
    for synonym in _BY_LENGTH:
        # Edit distance is at least the length gap, which bounds the ratio
        gap = abs(len(normalized) - len(synonym))
        if 1.0 - gap / max(len(normalized), len(synonym)) < FUZZY_THRESHOLD:
            continue
        ratio = levenshtein_ratio(normalized, synonym)
        if ratio >= FUZZY_THRESHOLD and ratio > best_ratio:
            best_key, best_ratio = _INDEX[synonym].key, ratio
    if best_key is None:
        return None
    return LabelMatch(best_key, 0.75 + best_ratio * 0.25)
