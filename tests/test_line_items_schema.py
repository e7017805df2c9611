"""Tests for line-item schemas and lenient parsing.

Covers:
- Request line items by kind (camelCase and snake_case input)
- Lenient decimal coercion, storage range and scale
- Legacy kinds and field names
- Fields not meaningful for a kind are dropped
- Unknown kinds and broken rows never raise
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from pydantic import TypeAdapter, ValidationError

from devispro.schemas.line_items import (
    LaborItem,
    LenientLineItem,
    MaterialItem,
    SectionItem,
    TextItem,
    UnknownItem,
    WorkItem,
    parse_line_item,
    parse_line_items,
)
from devispro.schemas.types import coerce_amount, coerce_decimal

line_item_adapter = TypeAdapter(LenientLineItem)


class TestCoerceDecimal:
    def test_numbers(self) -> None:
        assert coerce_decimal(3) == Decimal("3")
        assert coerce_decimal(0.1) == Decimal("0.1")
        assert coerce_decimal(Decimal("2.50")) == Decimal("2.50")

    def test_strings(self) -> None:
        assert coerce_decimal("12.5") == Decimal("12.5")
        assert coerce_decimal("12,5") == Decimal("12.5")
        assert coerce_decimal(" 1 234,50 ") == Decimal("1234.50")
        assert coerce_decimal("1 234,50") == Decimal("1234.50")

    def test_not_numeric(self) -> None:
        assert coerce_decimal(None) is None
        assert coerce_decimal("") is None
        assert coerce_decimal("abc") is None
        assert coerce_decimal(True) is None
        assert coerce_decimal([1]) is None
        assert coerce_decimal("NaN") is None
        assert coerce_decimal(Decimal("Infinity")) is None

    def test_out_of_storage_range(self) -> None:
        assert coerce_decimal("1e30") is None
        assert coerce_decimal("-1e30") is None
        assert coerce_decimal("1E+999999") is None
        assert coerce_decimal(10**8) is None
        assert coerce_decimal("99999999.99") == Decimal("99999999.99")
        assert coerce_decimal("0") == Decimal("0")

    def test_amount_at_cent_scale(self) -> None:
        assert coerce_amount("0.125") == Decimal("0.13")
        assert coerce_amount("2,005") == Decimal("2.01")
        assert coerce_amount("abc") is None
        assert MaterialItem(quantity="0.125", unit_price="9.999").quantity == Decimal("0.13")
        assert MaterialItem(quantity="0.125", unit_price="9.999").unit_price == Decimal("10.00")


class TestRequestLineItem:
    def test_camel_case_payload(self) -> None:
        item = line_item_adapter.validate_python({
            "kind": "material",
            "label": "Carrelage",
            "quantity": "12,5",
            "unit": "m²",
            "unitPrice": "35",
            "taxRatePercent": 10,
            "technicalDetails": ["Grès cérame 60x60"],
        })
        assert isinstance(item, MaterialItem)
        assert item.quantity == Decimal("12.5")
        assert item.unit_price == Decimal("35")
        assert item.technical_details == ["Grès cérame 60x60"]

    def test_snake_case_payload(self) -> None:
        item = line_item_adapter.validate_python({"kind": "labor", "unit_price": "45", "quantity": 8})
        assert isinstance(item, LaborItem)
        assert item.unit_price == Decimal("45")

    def test_unknown_kind_kept(self) -> None:
        item = line_item_adapter.validate_python({"kind": "drawing", "position": 2})
        assert isinstance(item, UnknownItem)
        assert item.kind == "drawing"

    def test_legacy_heading_normalised(self) -> None:
        item = line_item_adapter.validate_python({"kind": "title", "title": "Lot 1"})
        assert isinstance(item, SectionItem)
        assert item.label == "Lot 1"

    def test_not_an_object_rejected(self) -> None:
        with pytest.raises(ValidationError):
            line_item_adapter.validate_python("material")

    def test_heading_has_no_price_field(self) -> None:
        item = line_item_adapter.validate_python({"kind": "section", "label": "Lot 1"})
        assert not hasattr(item, "unit_price")

    def test_heading_refuses_price_at_construction(self) -> None:
        with pytest.raises(ValidationError):
            SectionItem(label="Lot 1", unit_price=Decimal("10"))

    def test_serializes_camel_case(self) -> None:
        item = WorkItem(quantity=Decimal("1"), unit_price=Decimal("10"))
        dumped = item.model_dump(by_alias=True)
        assert "unitPrice" in dumped
        assert "lineTotalExclTax" in dumped

    def test_items_are_frozen(self) -> None:
        item = TextItem(body="x")
        with pytest.raises(ValidationError):
            item.body = "y"


class TestParseLineItem:
    def test_model_instance_returned_unchanged(self) -> None:
        item = SectionItem(label="A")
        assert parse_line_item(item) is item

    def test_legacy_kinds(self) -> None:
        assert isinstance(parse_line_item({"type": "title", "title": "Lot"}), SectionItem)
        assert parse_line_item({"type": "subtitle"}).kind == "subsection"

    def test_kind_is_case_insensitive(self) -> None:
        assert isinstance(parse_line_item({"kind": " Material "}), MaterialItem)

    def test_irrelevant_fields_dropped(self) -> None:
        item = parse_line_item({"kind": "section", "label": "A", "unitPrice": "10", "quantity": 3})
        assert isinstance(item, SectionItem)
        assert item.label == "A"

    def test_technical_details_string(self) -> None:
        item = parse_line_item({"kind": "work", "details": "Pose collée"})
        assert item.technical_details == ["Pose collée"]

    def test_unknown_kind(self) -> None:
        item = parse_line_item({"kind": "photo", "position": 4, "url": "x.png"})
        assert isinstance(item, UnknownItem)
        assert item.kind == "photo"
        assert item.position == 4

    def test_missing_kind(self) -> None:
        item = parse_line_item({"label": "?"})
        assert isinstance(item, UnknownItem)
        assert item.kind == ""

    def test_broken_row_keeps_kind_and_position(self) -> None:
        row_id = uuid.uuid4()
        item = parse_line_item({"kind": "text", "position": "3", "id": row_id, "body": {"not": "text"}})
        assert isinstance(item, TextItem)
        assert item.position == 3
        assert item.id == row_id
        assert item.body is None

    def test_garbage_position(self) -> None:
        assert parse_line_item({"kind": "unknown-kind", "position": "first"}).position == 0

    def test_parse_many(self) -> None:
        items = parse_line_items([{"kind": "section"}, {"kind": "labor", "quantity": "2"}])
        assert [i.kind for i in items] == ["section", "labor"]
