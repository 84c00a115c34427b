# expense_tracker/services/receipts.py
"""Receipt extraction pipeline.

    validate -> save temp file -> (PDF) extract text | (image) base64
             -> build prompt -> one AI call -> parse JSON -> format record

Any failure aborts the run with a ReceiptError subclass; no partial record is
returned. The temp file is left behind for whoever manages the upload dir.
"""
import base64
import json
import logging
import os
import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as dateparser
from pydantic import ValidationError

from expense_tracker.core.config import settings
from expense_tracker.core.errors import (
    EmptyAIResponseError,
    FileTooLargeError,
    InvalidReceiptDataError,
    MalformedAIResponseError,
    UnsupportedFileTypeError,
)
from expense_tracker.schemas.receipt import ReceiptExtraction, ReceiptRecord, UntrustedReceipt
from expense_tracker.services import currency
from expense_tracker.services.pdf_parser import extract_pdf_text

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
SUPPORTED_MIME_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    PDF_MIME: "pdf",
}
VIRTUAL_UPLOAD_PREFIX = "/uploads"
DEFAULT_TITLE = "Unknown Expense"


@dataclass(frozen=True)
class SavedReceiptFile:
    temp_path: str
    virtual_path: str


# ---------------------------------------------------------------------------
# ingestion
# ---------------------------------------------------------------------------

def validate_upload(content_type: Optional[str], size: int, max_bytes: Optional[int] = None) -> str:
    """Return the normalized MIME type or raise before anything touches disk."""
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime not in SUPPORTED_MIME_TYPES:
        raise UnsupportedFileTypeError(
            "Unsupported file type. Please upload a JPEG, PNG, WebP image or PDF document."
        )
    limit = settings.MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    if size > limit:
        raise FileTooLargeError(f"File too large. Maximum size is {limit // (1024 * 1024)}MB.")
    return mime


def _extension_for(filename: Optional[str], mime: str) -> str:
    ext = os.path.splitext(os.path.basename(filename or ""))[1].lstrip(".").lower()
    if ext and re.fullmatch(r"[a-z0-9]{1,8}", ext):
        return ext
    return SUPPORTED_MIME_TYPES.get(mime, "bin")


def save_receipt_file(
    content: bytes,
    filename: Optional[str],
    mime: str,
    prefix: str = "receipt",
    tmp_dir: Optional[str] = None,
) -> SavedReceiptFile:
    """Write the upload under a fresh uuid name; the virtual path is derived separately."""
    directory = tmp_dir or settings.RECEIPT_TMP_DIR
    os.makedirs(directory, exist_ok=True)

    file_name = f"{prefix}-{uuid.uuid4()}.{_extension_for(filename, mime)}"
    temp_path = os.path.join(directory, file_name)
    with open(temp_path, "wb") as f:
        f.write(content)

    logger.debug("saved receipt upload (%d bytes) to %s", len(content), temp_path)
    return SavedReceiptFile(temp_path=temp_path, virtual_path=f"{VIRTUAL_UPLOAD_PREFIX}/{file_name}")


# ---------------------------------------------------------------------------
# prompt
# ---------------------------------------------------------------------------

def generate_receipt_prompt(
    input_type: str,
    categories: Iterable[str],
    text: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """Shared instruction template for image and text input."""
    if input_type not in ("image", "text"):
        raise ValueError(f"unknown receipt input type {input_type!r}")
    if input_type == "text" and text is None:
        raise ValueError("text input requires the extracted text")

    today_iso = (today or date.today()).isoformat()
    category_list = ", ".join(c for c in categories if c) or "(none yet)"
    currency_list = ", ".join(currency.supported_codes())

    introduction = "You are an expert at analyzing receipts and invoices."
    if input_type == "image":
        introduction += "\nExtract the following information from the receipt image:"
    else:
        introduction += (
            "\nExtract the following information from this receipt/invoice text:\n\n"
            f"{text}\n\nExtract the following information:"
        )

    fields = f"""
- title (required, string): a short descriptive name for the expense
- amount (required, number): the total paid, positive, without currency symbol
- currency (required, string): one of {currency_list}; use "USD" if unsure
- date (optional, string): YYYY-MM-DD, not later than today ({today_iso}); leave it out if unsure
- category (optional, string): the best match from this list: {category_list}
- suggestedCategory (optional, string): a new category name if none of the list fits
- vendor (optional, string): the merchant or service provider
- description (optional, string): any additional details

Respond with a single valid JSON object containing these keys.
Do not write anything before or after the JSON object."""
    return f"{introduction}\n{fields}\n"


# ---------------------------------------------------------------------------
# parsing
# ---------------------------------------------------------------------------

def _first_json_object(text: str) -> Optional[str]:
    """Return the first balanced {...} span, ignoring braces inside strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        # unbalanced from here; try the next opening brace
        start = text.find("{", start + 1)
    return None


def parse_ai_response(ai_response: Optional[str]) -> Dict[str, Any]:
    """Pull the JSON object out of a model reply that may carry extra prose."""
    if not ai_response or not ai_response.strip():
        raise EmptyAIResponseError("Empty response from AI")

    candidate = _first_json_object(ai_response) or ai_response.strip()
    try:
        data = json.loads(candidate)
    except ValueError as exc:
        logger.warning("could not parse AI response: %r", ai_response[:500])
        raise MalformedAIResponseError("Could not parse AI response") from exc
    if not isinstance(data, dict):
        raise MalformedAIResponseError("Could not parse AI response: expected a JSON object")
    return data


# ---------------------------------------------------------------------------
# repair + formatting
# ---------------------------------------------------------------------------

def _normalize_numeric_token(token: str) -> Optional[float]:
    """
    Normalize numeric token like '1,234.56' or '1 234,56' to float.
    Returns None on failure.
    """
    s = token.replace("\u00A0", "").replace(" ", "")
    # if both '.' and ',' present, the later one is the decimal separator
    if "," in s and "." in s:
        if s.rfind(".") > s.rfind(","):
            s = s.replace(",", "")
        else:
            s = s.replace(".", "").replace(",", ".")
    elif "," in s and re.match(r"^-?[0-9]+,[0-9]{2}$", s):
        s = s.replace(",", ".")
    else:
        s = s.replace(",", "")
    try:
        return float(s)
    except ValueError:
        return None


def _coerce_amount(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        # drop currency symbols/codes, keep digits, separators and sign
        cleaned = re.sub(r"[^0-9,.\-\s\u00A0]", "", value).strip()
        if not cleaned:
            return None
        amount = _normalize_numeric_token(cleaned)
        if amount is None:
            return None
    else:
        return None
    if amount != amount or amount in (float("inf"), float("-inf")):
        return None
    return abs(amount)


# two unrelated defaults: a field the text leaves out shows up as a difference
_DATE_DEFAULTS = (datetime(1901, 1, 1), datetime(1902, 2, 2))


def _coerce_date(value: Any, today: date) -> Optional[date]:
    if value is None or value == "":
        return None
    try:
        first, second = (dateparser.parse(str(value), default=d).date() for d in _DATE_DEFAULTS)
    except (ValueError, OverflowError, TypeError):
        logger.debug("dropping unparseable receipt date %r", value)
        return None
    if first != second:
        logger.debug("dropping incomplete receipt date %r", value)
        return None
    parsed = first
    if parsed > today:
        logger.debug("dropping future receipt date %s", parsed)
        return None
    return parsed


def _clean_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def format_receipt_data(
    extracted: Dict[str, Any],
    receipt_url: Optional[str] = None,
    today: Optional[date] = None,
) -> ReceiptRecord:
    """Turn loosely-typed model output into a valid ReceiptRecord. Never raises
    for missing or badly typed fields; each gets its default instead."""
    raw = UntrustedReceipt.model_validate(extracted)
    today = today or date.today()

    vendor = _clean_text(raw.vendor)
    title = _clean_text(raw.title) or vendor or DEFAULT_TITLE

    amount = _coerce_amount(raw.amount)
    if amount is None:
        logger.warning("receipt amount missing or unparseable (%r); defaulting to 0", raw.amount)
        amount = 0.0

    code = currency.normalize_currency(raw.currency if isinstance(raw.currency, str) else None)
    if code is None:
        if raw.currency:
            logger.info("unsupported receipt currency %r; using %s", raw.currency, currency.BASE_CURRENCY)
        code = currency.BASE_CURRENCY

    return ReceiptRecord(
        title=title,
        amount=amount,
        currency=code,
        date=_coerce_date(raw.date, today),
        category=_clean_text(raw.category),
        suggested_category=_clean_text(raw.suggested_category),
        vendor=vendor,
        description=_clean_text(raw.description),
        receipt_url=receipt_url,
    )


# ---------------------------------------------------------------------------
# orchestration
# ---------------------------------------------------------------------------

def process_receipt_file(
    content: bytes,
    filename: Optional[str],
    content_type: Optional[str],
    categories: List[str],
    client,
    tmp_dir: Optional[str] = None,
) -> ReceiptExtraction:
    """Run the whole pipeline for one upload. ``client`` is a ReceiptAIClient."""
    mime = validate_upload(content_type, len(content))
    saved = save_receipt_file(content, filename, mime, tmp_dir=tmp_dir)
    logger.info("processing receipt %s (%s, %d bytes)", saved.virtual_path, mime, len(content))

    if mime == PDF_MIME:
        try:
            text = extract_pdf_text(saved.temp_path)
        except Exception as exc:
            logger.warning("pdf text extraction failed for %s: %s", saved.temp_path, exc)
            raise InvalidReceiptDataError("Could not read text from the PDF receipt") from exc
        if not text.strip():
            raise InvalidReceiptDataError("The PDF receipt contains no readable text")
        prompt = generate_receipt_prompt("text", categories, text=text)
        reply = client.complete_text(prompt)
    else:
        image_b64 = base64.b64encode(content).decode("ascii")
        prompt = generate_receipt_prompt("image", categories)
        reply = client.complete_vision(prompt, image_b64, mime)

    extracted = parse_ai_response(reply)
    try:
        record = format_receipt_data(extracted, receipt_url=saved.virtual_path)
    except ValidationError as exc:
        raise InvalidReceiptDataError("Receipt data failed validation") from exc

    logger.info("receipt %s extracted: %s %.2f %s", saved.virtual_path, record.title, record.amount, record.currency)
    return ReceiptExtraction(data=record, file_path=saved.virtual_path)
