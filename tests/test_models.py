import json
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from iexpense.exceptions import PersistenceError, ValidationError
from iexpense.models import Category, ExpenseRecord, decode_records, encode_records


class TestCategory:
    def test_labels(self):
        assert Category.BUSINESS.label == "Business"
        assert Category.PERSONAL.label == "Personal"

    @pytest.mark.parametrize("raw", ["business", "Business", "  BUSINESS "])
    def test_parse_accepts_wire_values_and_labels(self, raw):
        assert Category.parse(raw) is Category.BUSINESS

    def test_parse_passes_members_through(self):
        assert Category.parse(Category.PERSONAL) is Category.PERSONAL

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValidationError):
            Category.parse("travel")


class TestExpenseRecord:
    def test_create_generates_uuid(self):
        record = ExpenseRecord.create("Rent", "business", 1200.0)
        UUID(record.id)
        assert record.category is Category.BUSINESS
        assert record.amount == Decimal("1200")

    def test_create_generates_distinct_ids(self):
        first = ExpenseRecord.create("Coffee", Category.PERSONAL, "4.50")
        second = ExpenseRecord.create("Coffee", Category.PERSONAL, "4.50")
        assert first.id != second.id

    def test_create_keeps_float_amount_exact(self):
        record = ExpenseRecord.create("Coffee", Category.PERSONAL, 4.1)
        assert record.amount == Decimal("4.1")

    @pytest.mark.parametrize("amount", ["Infinity", "-Infinity", "NaN", float("inf"), Decimal("sNaN")])
    def test_create_rejects_non_finite_amounts(self, amount):
        with pytest.raises(ValidationError, match="finite"):
            ExpenseRecord.create("Yacht", Category.BUSINESS, amount)

    def test_records_are_immutable(self):
        record = ExpenseRecord.create("Rent", Category.BUSINESS, 1)
        with pytest.raises(AttributeError):
            record.name = "Other"  # type: ignore[misc]

    def test_to_dict_uses_wire_names(self):
        record = ExpenseRecord.create("Coffee", Category.PERSONAL, "4.5")
        assert record.to_dict() == {
            "id": record.id,
            "name": "Coffee",
            "type": "personal",
            "amount": 4.5,
        }

    def test_integral_amounts_are_written_as_integers(self):
        record = ExpenseRecord.create("Rent", Category.BUSINESS, "1200.00")
        assert record.to_dict()["amount"] == 1200

    def test_from_dict_preserves_id_spelling(self):
        data = {
            "id": "E621E1F8-C36C-495A-93FC-0C247A3E6E5F",
            "name": "Laptop",
            "type": "business",
            "amount": 999.99,
        }
        record = ExpenseRecord.from_dict(data)
        assert record.id == "E621E1F8-C36C-495A-93FC-0C247A3E6E5F"
        assert record.amount == Decimal("999.99")

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "x", "type": "business", "amount": 1},
            {"id": "not-a-uuid", "name": "x", "type": "business", "amount": 1},
            {"id": "e621e1f8-c36c-495a-93fc-0c247a3e6e5f", "name": 3, "type": "business", "amount": 1},
            {"id": "e621e1f8-c36c-495a-93fc-0c247a3e6e5f", "name": "x", "type": "travel", "amount": 1},
            {"id": "e621e1f8-c36c-495a-93fc-0c247a3e6e5f", "name": "x", "type": "business", "amount": "1"},
            {"id": "e621e1f8-c36c-495a-93fc-0c247a3e6e5f", "name": "x", "type": "business", "amount": True},
            {"id": "e621e1f8-c36c-495a-93fc-0c247a3e6e5f", "name": "x", "type": "business", "amount": float("inf")},
            {"id": "e621e1f8-c36c-495a-93fc-0c247a3e6e5f", "name": "x", "type": "business", "amount": Decimal("NaN")},
            ["not", "an", "object"],
        ],
    )
    def test_from_dict_rejects_invalid_objects(self, data):
        with pytest.raises(ValidationError):
            ExpenseRecord.from_dict(data)


class TestCodec:
    def test_blob_is_json_array(self):
        records = [
            ExpenseRecord.create("Rent", Category.BUSINESS, "1200.00"),
            ExpenseRecord.create("Coffee", Category.PERSONAL, "4.50"),
        ]
        payload = json.loads(encode_records(records).decode("utf-8"))
        assert [item["name"] for item in payload] == ["Rent", "Coffee"]
        assert [item["type"] for item in payload] == ["business", "personal"]

    def test_round_trip_preserves_order_and_fields(self):
        records = [
            ExpenseRecord.create("Rent", Category.BUSINESS, "1200.00"),
            ExpenseRecord.create("Café", Category.PERSONAL, "4.50"),
            ExpenseRecord.create("Taxi", Category.BUSINESS, "0.10"),
        ]
        assert decode_records(encode_records(records)) == records

    def test_amounts_keep_every_digit(self):
        amount = Decimal("1234567890123456.78")
        [record] = decode_records(encode_records([ExpenseRecord.create("Yacht", Category.BUSINESS, amount)]))
        assert record.amount == amount
        assert str(record.amount) == "1234567890123456.78"

    def test_amount_is_written_as_exact_literal(self):
        record = ExpenseRecord.create("Yacht", Category.BUSINESS, "12345678901234567890.05")
        assert b'"amount": 12345678901234567890.05' in encode_records([record])

    def test_non_finite_amounts_cannot_be_encoded(self):
        broken = ExpenseRecord(str(uuid4()), "Broken", Category.BUSINESS, Decimal("NaN"))
        with pytest.raises(ValueError):
            encode_records([broken])

    def test_empty_sequence(self):
        assert decode_records(encode_records([])) == []

    @pytest.mark.parametrize(
        "raw",
        [
            b"not json",
            b"{}",
            b"\xff\xfe",
            b'[{"name": "x"}]',
            b'[{"id": "e621e1f8-c36c-495a-93fc-0c247a3e6e5f", "name": "x", "type": "business", "amount": NaN}]',
            b'[{"id": "e621e1f8-c36c-495a-93fc-0c247a3e6e5f", "name": "x", "type": "business", "amount": Infinity}]',
        ],
    )
    def test_malformed_blobs_raise(self, raw):
        with pytest.raises(PersistenceError):
            decode_records(raw)

    def test_duplicate_ids_keep_first_occurrence(self):
        record = ExpenseRecord.create("Rent", Category.BUSINESS, 1200)
        duplicate = {**record.to_dict(), "name": "Copy"}
        raw = json.dumps([record.to_dict(), duplicate]).encode("utf-8")
        assert decode_records(raw) == [record]
