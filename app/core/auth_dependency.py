"""
Authentication dependencies.

get_current_user_id is the single identity capability the rest of the API
uses. The mechanism behind it is chosen by AUTH_STRATEGY:

- telegram: "Authorization: tma <initData>" signed by the bot
- jwt: "Authorization: Bearer <token>" whose sub is the user id
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core import config
from app.core.logging_config import sanitize_log_data
from app.core.security import decode_access_token, validate_init_data
from app.db.session import SessionLocal
from app.db.models.user import User
from app.services.user_service import get_or_create_telegram_user

logger = logging.getLogger(__name__)


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
    )


def _split_authorization(authorization: Optional[str]):
    if not authorization:
        raise _unauthorized("Unauthorized: No valid user session")
    scheme, _, credentials = authorization.partition(" ")
    return scheme.lower(), credentials.strip()


def _telegram_user_id(credentials: str, db: Session) -> int:
    fields = validate_init_data(credentials)
    if not fields or not isinstance(fields.get("user"), dict):
        logger.warning(f"Rejected Telegram sign-in: {sanitize_log_data({'init_data': credentials, 'valid_signature': bool(fields)})}")
        raise _unauthorized("Invalid Telegram init data")
    user = get_or_create_telegram_user(db, fields["user"], fields.get("start_param"))
    return user.id


def _jwt_user_id(credentials: str, db: Session) -> int:
    payload = decode_access_token(credentials)
    if not payload or payload.get("sub") is None:
        raise _unauthorized("Invalid token")
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token") from None
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise _unauthorized("Invalid token")
    return user_id


def get_current_user_id(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> int:
    """Resolve the authenticated user id with the configured strategy."""
    scheme, credentials = _split_authorization(authorization)

    if config.AUTH_STRATEGY == "telegram":
        if scheme != "tma":
            raise _unauthorized("Expected Telegram init data")
        return _telegram_user_id(credentials, db)

    if config.AUTH_STRATEGY == "jwt":
        if scheme != "bearer":
            raise _unauthorized("Expected bearer token")
        return _jwt_user_id(credentials, db)

    logger.error(f"Unsupported AUTH_STRATEGY: {config.AUTH_STRATEGY}")
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Authentication misconfigured")


def get_current_user_obj(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> User:
    """Get current User object for the authenticated request."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=404,
            detail="User not found"
        )
    return user
