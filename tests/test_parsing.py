"""Tests for label resolution, field extractors, and order drafting."""

import time

import pytest

from fleetops.parsing.fields import (
    MAX_NOTES_LENGTH,
    Window,
    detect_label,
    extract_contact,
    extract_customer,
    extract_delivery_window,
    extract_destination,
    extract_notes,
    extract_origin,
    extract_pickup_window,
    extract_required_truck,
    normalize_datetime,
    normalize_text,
    normalize_year,
    parse_window,
)
from fleetops.parsing.labels import (
    is_reference_label,
    levenshtein_ratio,
    normalize_label,
    resolve_label,
)
from fleetops.parsing.order_parser import (
    OrderDraft,
    confidence_to_badge,
    format_confidence,
    parse_ocr_to_order,
)


class TestLabels:
    """Tests for label normalisation and resolution."""

    def test_normalize_label(self) -> None:
        assert normalize_label("  Pick-Up  Address: ") == "pick up address"

    def test_levenshtein_ratio(self) -> None:
        assert levenshtein_ratio("customer", "customer") == 1.0
        assert levenshtein_ratio("cust0mer", "customer") == pytest.approx(0.875)
        assert levenshtein_ratio("", "abc") == 0.0

    @pytest.mark.parametrize(
        "label, key",
        [
            ("Customer", "customer"),
            ("CLIENT", "customer"),
            ("Consignee", "customer"),
            ("Shipper", "origin"),
            ("Pickup Address", "origin"),
            ("Receiver", "destination"),
            ("Pickup Window", "pickup_window"),
            ("PU Date", "pickup_window"),
            ("Delivery Window End", "delivery_end"),
            ("Equipment Type", "required_truck"),
            ("Special Instructions", "notes"),
            ("Dispatcher", "contact"),
        ],
    )
    def test_exact_synonyms(self, label: str, key: str) -> None:
        match = resolve_label(label)
        assert match is not None
        assert match.key == key

    def test_canonical_scores_higher_than_synonym(self) -> None:
        assert resolve_label("Customer").score > resolve_label("Client").score

    def test_prefix_match(self) -> None:
        match = resolve_label("Origin City")
        assert match.key == "origin"
        assert match.score < resolve_label("Origin").score

    def test_fuzzy_match(self) -> None:
        match = resolve_label("Cust0mer")
        assert match.key == "customer"

    def test_unrelated_label(self) -> None:
        assert resolve_label("Load Number") is None
        assert resolve_label("") is None

    def test_strict_rejects_lookalikes(self) -> None:
        assert resolve_label("Cust0mer", strict=True) is None
        assert resolve_label("customer", strict=True).key == "customer"

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("Pickup #", True),
            ("Trailer No.", True),
            ("Delivery Number", True),
            ("Customer PO", True),
            ("Load Ref", True),
            ("Notes", False),
            ("Pickup Window", False),
        ],
    )
    def test_reference_label(self, label: str, expected: bool) -> None:
        assert is_reference_label(label) is expected


class TestDateNormalisation:
    """Tests for date-time normalisation."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2025-10-22 09:00", "2025-10-22T09:00"),
            ("2025-10-22T09:00:00Z", "2025-10-22T09:00"),
            ("2025-10-22", "2025-10-22T00:00"),
            ("10/22/2025 08:00", "2025-10-22T08:00"),
            ("10/22/25 8:00 am", "2025-10-22T08:00"),
            ("10/22/25 8:00 PM", "2025-10-22T20:00"),
            ("10/22/2025 12:15 am", "2025-10-22T00:15"),
            ("Oct 23, 2025 2:30 PM", "2025-10-23T14:30"),
            ("Thursday, October 23 2025 3pm", "2025-10-23T15:00"),
            ("1/2/71", "1971-01-02T00:00"),
        ],
    )
    def test_formats(self, raw: str, expected: str) -> None:
        assert normalize_datetime(raw) == expected

    @pytest.mark.parametrize("raw", ["", "ASAP", "11:00", "13/45/2025", "25:00"])
    def test_unreadable(self, raw: str) -> None:
        assert normalize_datetime(raw) is None

    def test_two_digit_year_pivot(self) -> None:
        assert normalize_year(69) == 2069
        assert normalize_year(70) == 1970
        assert normalize_year(2025) == 2025


class TestParseWindow:
    """Tests for window splitting."""

    def test_spaced_hyphen_with_bare_end_time(self) -> None:
        assert parse_window("10/22/2025 08:00 - 12:00") == (
            "2025-10-22T08:00",
            "2025-10-22T12:00",
        )

    def test_to_separator(self) -> None:
        assert parse_window("2025-10-23 09:00 to 2025-10-23 11:00") == (
            "2025-10-23T09:00",
            "2025-10-23T11:00",
        )

    def test_unspaced_hyphen_after_time(self) -> None:
        assert parse_window("2025-10-22 09:00-11:00") == (
            "2025-10-22T09:00",
            "2025-10-22T11:00",
        )

    def test_single_datetime(self) -> None:
        assert parse_window("2025-10-22 09:00") == ("2025-10-22T09:00", None)

    def test_unreadable(self) -> None:
        assert parse_window("first thing") == (None, None)
        assert parse_window(None) == (None, None)


class TestDetectLabel:
    def test_colon(self) -> None:
        match, value = detect_label("Customer: Acme Industrial")
        assert (match.key, value) == ("customer", "Acme Industrial")

    def test_dash(self) -> None:
        match, value = detect_label("Customer - Acme Industrial")
        assert (match.key, value) == ("customer", "Acme Industrial")

    def test_columns(self) -> None:
        match, value = detect_label("Customer      Acme   Industrial")
        assert (match.key, value) == ("customer", "Acme Industrial")

    def test_bare_label(self) -> None:
        match, value = detect_label("Shipper")
        assert (match.key, value) == ("origin", "")

    def test_plain_sentence_is_not_a_label(self) -> None:
        assert detect_label("Delivery appointment required") is None
        assert detect_label("1200 W Lake St, Chicago, IL") is None

    def test_reference_number_is_not_a_label(self) -> None:
        assert detect_label("Pickup #: 4471") is None
        assert detect_label("Trailer No. 5321 - dropped") is None
        assert detect_label("Pickup #") is None

    def test_phone_number_stays_contact(self) -> None:
        match, value = detect_label("Phone #: 555-0100")
        assert (match.key, value) == ("contact", "555-0100")

    def test_long_first_column_is_not_a_label(self) -> None:
        line = "Customer pallets loaded at the rear dock door   Qty 12"
        assert detect_label(line) is None


class TestFieldExtractors:
    """Tests for each field extractor in isolation."""

    def test_customer(self, sample_text: str) -> None:
        assert extract_customer(sample_text) == "Acme Industrial"

    def test_origin_and_destination(self, sample_text: str) -> None:
        assert extract_origin(sample_text) == "Chicago, IL"
        assert extract_destination(sample_text) == "Atlanta, GA"

    def test_bare_label_reads_following_lines(self) -> None:
        text = (
            "Shipper\n"
            "Midwest Cold Storage\n"
            "1200 W Lake St, Chicago, IL\n"
            "Receiver: Peach State Foods\n"
        )
        assert extract_origin(text) == (
            "Midwest Cold Storage, 1200 W Lake St, Chicago, IL"
        )
        assert extract_destination(text) == "Peach State Foods"

    def test_fuzzy_label(self) -> None:
        assert extract_customer("Cust0mer: Acme Industrial") == "Acme Industrial"

    def test_pickup_window(self, sample_text: str) -> None:
        assert extract_pickup_window(sample_text) == Window(
            start="2025-10-22T08:00",
            end="2025-10-22T12:00",
            raw="10/22/2025 08:00 - 12:00",
        )

    def test_delivery_window(self, sample_text: str) -> None:
        window = extract_delivery_window(sample_text)
        assert (window.start, window.end) == ("2025-10-23T09:00", "2025-10-23T11:00")

    def test_separate_start_and_end_labels(self) -> None:
        text = "Pickup Start: 2025-10-22 08:00\nPickup End: 11:30\n"
        window = extract_pickup_window(text)
        assert (window.start, window.end) == ("2025-10-22T08:00", "2025-10-22T11:30")

    def test_place_label_with_a_date_is_a_window(self) -> None:
        text = "Pickup: 10/22/2025 08:00\nShipper: Midwest Cold Storage\n"
        assert extract_pickup_window(text).start == "2025-10-22T08:00"
        assert extract_origin(text) == "Midwest Cold Storage"

    def test_place_without_letters_is_absent(self) -> None:
        assert extract_origin("Origin: 60601") is None
        assert extract_destination("Destination - 30301") is None
        assert extract_required_truck("Equipment: 53") is None

    def test_no_window(self) -> None:
        assert extract_delivery_window("Customer: Acme") == Window()

    def test_required_truck_from_label(self, sample_text: str) -> None:
        assert extract_required_truck(sample_text) == "53' Reefer"

    def test_required_truck_from_keyword(self) -> None:
        assert extract_required_truck("Load requires a FLATBED with tarps") == "Flatbed"

    def test_ambiguous_truck_keywords(self) -> None:
        assert extract_required_truck("Reefer or dry van accepted") is None
        assert extract_required_truck("No equipment mentioned") is None

    def test_notes_block(self, sample_text: str) -> None:
        assert extract_notes(sample_text) == "Keep temp at 34F\nDriver must call ahead"

    def test_notes_capped(self) -> None:
        text = "Notes: " + "x" * (MAX_NOTES_LENGTH + 500)
        assert len(extract_notes(text)) == MAX_NOTES_LENGTH

    def test_contact(self, sample_text: str) -> None:
        assert extract_contact(sample_text) == "Dana 555-0100"

    def test_extractors_are_independent(self) -> None:
        text = "Customer: Acme Industrial"
        assert extract_customer(text) == "Acme Industrial"
        assert extract_origin(text) is None
        assert extract_notes(text) is None

    def test_normalize_text(self) -> None:
        raw = "Pickup Window:\t10/22/2025 08:00 – 12:00\r\n• Notes"
        assert normalize_text(raw) == "Pickup Window: 10/22/2025 08:00 - 12:00\n- Notes"


class TestParseOcrToOrder:
    """Tests for the composed order draft."""

    @pytest.mark.parametrize("text", ["", "   \n  ", None])
    def test_empty_input(self, text) -> None:
        draft = parse_ocr_to_order(text)
        assert draft == OrderDraft()
        assert draft.is_empty()
        assert draft.warnings == []

    def test_full_document(self, sample_text: str) -> None:
        draft = parse_ocr_to_order(sample_text)
        assert draft.fields() == {
            "customer": "Acme Industrial",
            "origin": "Chicago, IL",
            "destination": "Atlanta, GA",
            "pu_window_start": "2025-10-22T08:00",
            "pu_window_end": "2025-10-22T12:00",
            "del_window_start": "2025-10-23T09:00",
            "del_window_end": "2025-10-23T11:00",
            "required_truck": "53' Reefer",
            "notes": "Keep temp at 34F\nDriver must call ahead\nContact: Dana 555-0100",
        }
        assert draft.warnings == []

    def test_deterministic(self, sample_text: str) -> None:
        assert parse_ocr_to_order(sample_text) == parse_ocr_to_order(sample_text)

    def test_contact_without_notes(self) -> None:
        draft = parse_ocr_to_order("Phone: 555-0100")
        assert draft.notes == "Contact: 555-0100"

    def test_unreadable_window_warns(self) -> None:
        draft = parse_ocr_to_order("Pickup Window: ASAP\nCustomer: Acme")
        assert draft.pu_window_start is None
        assert draft.pu_window_end is None
        assert draft.customer == "Acme"
        assert any("pickup window" in warning for warning in draft.warnings)

    def test_reversed_window_drops_end(self) -> None:
        draft = parse_ocr_to_order("Delivery Window: 2025-10-23 14:00 - 12:00")
        assert draft.del_window_start == "2025-10-23T14:00"
        assert draft.del_window_end is None
        assert any("before start" in warning for warning in draft.warnings)

    def test_overlong_value_dropped(self) -> None:
        draft = parse_ocr_to_order("Customer: " + "A" * 300)
        assert draft.customer is None
        assert draft.warnings

    def test_reference_numbers_are_not_places(self) -> None:
        draft = parse_ocr_to_order(
            "Pickup #: 4471\nShipper: Acme DC, Chicago IL\nTrailer #: 5321"
        )
        assert draft.origin == "Acme DC, Chicago IL"
        assert draft.required_truck is None

    def test_wide_column_document_parses_quickly(self) -> None:
        rows = [
            f"Item description {i} with extra words   Qty 12   Weight 4500 lbs"
            for i in range(200)
        ]
        text = "Customer: Acme Industrial\n" + "\n".join(rows)

        started = time.perf_counter()
        draft = parse_ocr_to_order(text)
        assert time.perf_counter() - started < 1.0
        assert draft.customer == "Acme Industrial"

    def test_noise_never_raises(self) -> None:
        noise = "::: -- \n\x0c|||\n12:00 - \n: value\nCustomer:\n"
        draft = parse_ocr_to_order(noise)
        assert isinstance(draft, OrderDraft)


class TestConfidence:
    @pytest.mark.parametrize(
        "score, badge",
        [
            (0.99, "success"),
            (0.85, "success"),
            (0.84, "default"),
            (0.6, "default"),
            (0.59, "warning"),
            (0.0, "warning"),
            (None, "default"),
        ],
    )
    def test_bands(self, score, badge) -> None:
        assert confidence_to_badge(score) == badge

    def test_format_confidence(self) -> None:
        assert format_confidence(0.876) == "88%"
        assert format_confidence(None) == "—"
