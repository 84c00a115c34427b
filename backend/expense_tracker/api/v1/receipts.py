# expense_tracker/api/v1/receipts.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from expense_tracker.api.v1.deps import get_current_user
from expense_tracker.core.config import settings
from expense_tracker.db import crud, models
from expense_tracker.db.session import get_db
from expense_tracker.schemas.receipt import ReceiptExtraction, ReceiptRecord
from expense_tracker.services.ai_client import ReceiptAIClient, get_receipt_client
from expense_tracker.services.defaults import palette_color
from expense_tracker.services.receipts import process_receipt_file, validate_upload

logger = logging.getLogger(__name__)
router = APIRouter(tags=["receipts"])


def resolve_category_id(db: Session, user_id: int, record: ReceiptRecord) -> Optional[int]:
    """Existing category matching the extracted name, else a new one from the suggestion."""
    if record.category:
        match = crud.get_category_by_name(db, user_id, record.category)
        if match:
            return match.id

    suggestion = (record.suggested_category or "").strip()[:150]
    if not suggestion:
        return None
    match = crud.get_category_by_name(db, user_id, suggestion)
    if match:
        return match.id

    index = len(crud.list_categories(db, user_id))
    try:
        created = crud.save(db, models.Category(user_id=user_id, name=suggestion, color=palette_color(index)))
    except IntegrityError:
        # created concurrently under the same name
        match = crud.get_category_by_name(db, user_id, suggestion)
        return match.id if match else None
    logger.info("created category %r (%s) from receipt suggestion", created.name, created.id)
    return created.id


def _read_upload(file: UploadFile, limit: int) -> bytes:
    """Read at most ``limit + 1`` bytes so an oversized body is never fully buffered."""
    try:
        return file.file.read(limit + 1)
    finally:
        file.file.close()


@router.post("/process", response_model=ReceiptExtraction)
def process_receipt(
    file: UploadFile = File(...),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: ReceiptAIClient = Depends(get_receipt_client),
):
    """Extract expense fields from an uploaded receipt image or PDF.

    Nothing is saved as an expense; the result prefills the expense form.
    """
    # type and declared size are checked before the body is read
    validate_upload(file.content_type, file.size or 0)
    content = _read_upload(file, settings.MAX_UPLOAD_BYTES)
    validate_upload(file.content_type, len(content))

    category_names = [c.name for c in crud.list_categories(db, current_user.id)]
    result = process_receipt_file(content, file.filename, file.content_type, category_names, client)
    result.category_id = resolve_category_id(db, current_user.id, result.data)
    return result
