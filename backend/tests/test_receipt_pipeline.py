"""
Unit tests for the receipt extraction pipeline (no HTTP, fake AI client).
"""
import base64
import json
import os
from datetime import date, timedelta

import pytest

from conftest import FakeReceiptClient
from expense_tracker.core.errors import (
    EmptyAIResponseError,
    FileTooLargeError,
    InvalidReceiptDataError,
    MalformedAIResponseError,
    ReceiptServiceError,
    UnsupportedFileTypeError,
)
from expense_tracker.services import receipts

TODAY = date(2024, 6, 15)


class TestValidateUpload:
    @pytest.mark.parametrize("mime", ["image/jpeg", "image/png", "image/webp", "application/pdf"])
    def test_supported_types(self, mime):
        assert receipts.validate_upload(mime, 100) == mime

    def test_mime_parameters_ignored(self):
        assert receipts.validate_upload("Image/PNG; charset=binary", 1) == "image/png"

    @pytest.mark.parametrize("mime", ["image/gif", "text/plain", "", None])
    def test_unsupported_types(self, mime):
        with pytest.raises(UnsupportedFileTypeError):
            receipts.validate_upload(mime, 100)

    def test_size_limit_is_inclusive(self):
        assert receipts.validate_upload("image/png", 10, max_bytes=10) == "image/png"
        with pytest.raises(FileTooLargeError):
            receipts.validate_upload("image/png", 11, max_bytes=10)


class TestSaveReceiptFile:
    def test_writes_under_uuid_name(self, tmp_path):
        saved = receipts.save_receipt_file(b"abc", "shop.JPG", "image/jpeg", tmp_dir=str(tmp_path))
        name = os.path.basename(saved.temp_path)
        assert name.startswith("receipt-") and name.endswith(".jpg")
        assert saved.virtual_path == f"/uploads/{name}"
        with open(saved.temp_path, "rb") as f:
            assert f.read() == b"abc"

    def test_extension_falls_back_to_mime(self, tmp_path):
        saved = receipts.save_receipt_file(b"%PDF", None, "application/pdf", tmp_dir=str(tmp_path))
        assert saved.temp_path.endswith(".pdf")

    def test_names_are_unique(self, tmp_path):
        a = receipts.save_receipt_file(b"1", "a.png", "image/png", tmp_dir=str(tmp_path))
        b = receipts.save_receipt_file(b"2", "a.png", "image/png", tmp_dir=str(tmp_path))
        assert a.temp_path != b.temp_path


class TestPrompt:
    def test_image_prompt_lists_categories_and_keys(self):
        prompt = receipts.generate_receipt_prompt("image", ["Food & Dining", "Travel"], today=TODAY)
        assert "Food & Dining, Travel" in prompt
        for key in ("title", "amount", "currency", "date", "suggestedCategory", "vendor"):
            assert key in prompt
        assert "2024-06-15" in prompt
        assert "JSON" in prompt

    def test_text_prompt_embeds_text(self):
        prompt = receipts.generate_receipt_prompt("text", [], text="ACME STORE\nTOTAL 12.00", today=TODAY)
        assert "ACME STORE\nTOTAL 12.00" in prompt

    def test_text_prompt_requires_text(self):
        with pytest.raises(ValueError):
            receipts.generate_receipt_prompt("text", [])

    def test_unknown_input_type(self):
        with pytest.raises(ValueError):
            receipts.generate_receipt_prompt("audio", [])


class TestParseAIResponse:
    def test_bare_object(self):
        assert receipts.parse_ai_response('{"title": "Lunch", "amount": 12.5}') == {"title": "Lunch", "amount": 12.5}

    def test_object_inside_prose_and_fences(self):
        reply = 'Sure! Here it is:\n```json\n{"title": "Cab", "amount": 20}\n```\nAnything else?'
        assert receipts.parse_ai_response(reply)["title"] == "Cab"

    def test_braces_inside_strings(self):
        reply = 'x {"title": "a } b {", "amount": 1} y {"title": "second"}'
        assert receipts.parse_ai_response(reply) == {"title": "a } b {", "amount": 1}

    def test_nested_objects(self):
        reply = '{"title": "T", "meta": {"k": "v"}}'
        assert receipts.parse_ai_response(reply)["meta"] == {"k": "v"}

    @pytest.mark.parametrize("reply", ["", "   \n", None])
    def test_empty(self, reply):
        with pytest.raises(EmptyAIResponseError):
            receipts.parse_ai_response(reply)

    @pytest.mark.parametrize("reply", ["I could not read the receipt.", '{"title": ', "[1, 2, 3]"])
    def test_malformed(self, reply):
        with pytest.raises(MalformedAIResponseError):
            receipts.parse_ai_response(reply)

    def test_malformed_is_invalid_receipt_data(self):
        assert issubclass(MalformedAIResponseError, InvalidReceiptDataError)
        assert issubclass(EmptyAIResponseError, InvalidReceiptDataError)


class TestFormatReceiptData:
    def test_complete_record(self):
        record = receipts.format_receipt_data(
            {
                "title": " Groceries ",
                "amount": 42.1,
                "currency": "eur",
                "date": "2024-06-01",
                "category": "Food & Dining",
                "suggestedCategory": "",
                "vendor": "Carrefour",
                "description": "weekly shop",
            },
            receipt_url="/uploads/receipt-1.jpg",
            today=TODAY,
        )
        assert record.title == "Groceries"
        assert record.amount == 42.1
        assert record.currency == "EUR"
        assert record.date == date(2024, 6, 1)
        assert record.category == "Food & Dining"
        assert record.suggested_category is None
        assert record.receipt_url == "/uploads/receipt-1.jpg"

    def test_empty_input_gets_defaults(self):
        record = receipts.format_receipt_data({}, today=TODAY)
        assert record.title == "Unknown Expense"
        assert record.amount == 0.0
        assert record.currency == "USD"
        assert record.date is None

    def test_missing_title_and_currency_with_string_amount(self):
        record = receipts.format_receipt_data({"amount": "12.50"}, today=TODAY)
        assert record.title == "Unknown Expense"
        assert record.currency == "USD"
        assert record.amount == 12.5

    def test_title_falls_back_to_vendor(self):
        assert receipts.format_receipt_data({"vendor": "Uber"}, today=TODAY).title == "Uber"

    @pytest.mark.parametrize("raw, expected", [
        ("$1,234.56", 1234.56),
        ("1.234,56 €", 1234.56),
        ("12,50", 12.5),
        ("USD 7", 7.0),
        (-15, 15.0),
        ("-3.20", 3.2),
        (8, 8.0),
    ])
    def test_amount_repair(self, raw, expected):
        assert receipts.format_receipt_data({"amount": raw}, today=TODAY).amount == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["free", None, True, {"value": 3}, float("nan")])
    def test_unusable_amount_becomes_zero(self, raw):
        assert receipts.format_receipt_data({"amount": raw}, today=TODAY).amount == 0.0

    def test_unsupported_currency_becomes_usd(self):
        assert receipts.format_receipt_data({"currency": "XYZ"}, today=TODAY).currency == "USD"

    def test_future_date_dropped(self):
        future = (TODAY + timedelta(days=1)).isoformat()
        assert receipts.format_receipt_data({"date": future}, today=TODAY).date is None

    def test_today_kept(self):
        assert receipts.format_receipt_data({"date": "2024-06-15"}, today=TODAY).date == TODAY

    def test_loose_date_formats(self):
        assert receipts.format_receipt_data({"date": "June 3, 2024"}, today=TODAY).date == date(2024, 6, 3)

    @pytest.mark.parametrize("raw", ["12", "June 3", "2024-06", "March"])
    def test_incomplete_date_dropped(self, raw):
        assert receipts.format_receipt_data({"date": raw}, today=TODAY).date is None

    def test_garbage_date_dropped(self):
        assert receipts.format_receipt_data({"date": "not a date"}, today=TODAY).date is None

    def test_snake_case_suggestion_accepted(self):
        record = receipts.format_receipt_data({"suggested_category": "Pets"}, today=TODAY)
        assert record.suggested_category == "Pets"

    def test_unknown_keys_ignored(self):
        record = receipts.format_receipt_data({"title": "A", "tax": 3, "items": []}, today=TODAY)
        assert record.title == "A"


class TestProcessReceiptFile:
    def test_image_goes_through_vision(self, tmp_path):
        fake = FakeReceiptClient(reply=json.dumps({"title": "Coffee", "amount": "3.50", "currency": "GBP"}))
        result = receipts.process_receipt_file(b"\x89PNG-bytes", "c.png", "image/png", ["Food & Dining"], fake)

        assert result.data.title == "Coffee"
        assert result.data.amount == 3.5
        assert result.data.currency == "GBP"
        assert result.file_path.startswith("/uploads/receipt-")
        assert result.data.receipt_url == result.file_path

        kind, prompt, image_b64, mime = fake.calls[0]
        assert kind == "vision"
        assert "Food & Dining" in prompt
        assert base64.b64decode(image_b64) == b"\x89PNG-bytes"
        assert mime == "image/png"

    def test_pdf_goes_through_text(self, monkeypatch):
        monkeypatch.setattr(receipts, "extract_pdf_text", lambda path: "HOTEL INVOICE\nTOTAL 120.00")
        fake = FakeReceiptClient(reply='{"title": "Hotel", "amount": 120}')
        result = receipts.process_receipt_file(b"%PDF-1.4", "inv.pdf", "application/pdf", [], fake)

        assert result.data.amount == 120.0
        kind, prompt = fake.calls[0]
        assert kind == "text"
        assert "HOTEL INVOICE\nTOTAL 120.00" in prompt

    def test_pdf_without_text_is_invalid(self, monkeypatch):
        monkeypatch.setattr(receipts, "extract_pdf_text", lambda path: "  \n ")
        fake = FakeReceiptClient(reply="{}")
        with pytest.raises(InvalidReceiptDataError):
            receipts.process_receipt_file(b"%PDF-1.4", "scan.pdf", "application/pdf", [], fake)
        assert fake.calls == []

    def test_unreadable_pdf_is_invalid(self, monkeypatch):
        def boom(path):
            raise ValueError("not a pdf")

        monkeypatch.setattr(receipts, "extract_pdf_text", boom)
        with pytest.raises(InvalidReceiptDataError):
            receipts.process_receipt_file(b"junk", "x.pdf", "application/pdf", [], FakeReceiptClient())

    def test_unsupported_type_never_calls_ai(self, tmp_path):
        fake = FakeReceiptClient(reply="{}")
        with pytest.raises(UnsupportedFileTypeError):
            receipts.process_receipt_file(b"GIF89a", "a.gif", "image/gif", [], fake, tmp_dir=str(tmp_path))
        assert fake.calls == []
        assert os.listdir(tmp_path) == []

    def test_service_error_propagates(self):
        fake = FakeReceiptClient(error=ReceiptServiceError("down"))
        with pytest.raises(ReceiptServiceError):
            receipts.process_receipt_file(b"img", "a.jpg", "image/jpeg", [], fake)

    def test_prose_reply_is_malformed(self):
        fake = FakeReceiptClient(reply="Sorry, I cannot help with that.")
        with pytest.raises(MalformedAIResponseError):
            receipts.process_receipt_file(b"img", "a.jpg", "image/jpeg", [], fake)
