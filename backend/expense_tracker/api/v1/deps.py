# expense_tracker/api/v1/deps.py
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from expense_tracker.db import crud, models
from expense_tracker.db.session import get_db
from expense_tracker.services.security import decode_access_token

logger = logging.getLogger(__name__)

# "Authorization: Bearer <token>"; missing header is a 401, not FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> models.User:
    """Verify the provider-issued token and return the matching local user,
    creating it on first sight of a new subject."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as exc:
        logger.info("rejected bearer token: %s", exc)
        raise _unauthorized("Could not validate credentials")

    subject = str(payload["sub"])
    user = crud.get_user_by_external_id(db, subject)
    if user is not None:
        return user

    user = models.User(external_id=subject, email=payload.get("email"), name=payload.get("name"))
    try:
        user = crud.save(db, user)
    except IntegrityError:
        # another request provisioned the same subject first
        user = crud.get_user_by_external_id(db, subject)
        if user is None:
            raise
    else:
        logger.info("provisioned user %s for subject %s", user.id, subject)
    return user
