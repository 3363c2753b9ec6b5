"""
User lookups and first-visit registration for Telegram sign-ins.
"""
import logging
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from app.db.models.user import User

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user


def _referrer_from_start_param(db: Session, start_param: Optional[str], user_id: int) -> Optional[int]:
    # Invite links carry the referrer's id as the start parameter
    if not start_param or not start_param.isdigit():
        return None
    referrer_id = int(start_param)
    if referrer_id == user_id:
        return None
    if db.query(User.id).filter(User.id == referrer_id).first() is None:
        return None
    return referrer_id


def get_or_create_telegram_user(
    db: Session,
    telegram_user: Dict,
    start_param: Optional[str] = None,
) -> User:
    """
    Return the user for a validated Telegram profile, registering it on first visit.

    The Telegram id becomes the user id. Profile fields are refreshed on every
    visit; created_at and balance are never touched here.
    """
    try:
        user_id = int(telegram_user["id"])
    except (KeyError, TypeError, ValueError):
        raise ValidationError("Telegram user payload has no id") from None

    try:
        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            user = User(
                id=user_id,
                username=telegram_user.get("username"),
                first_name=telegram_user.get("first_name"),
                last_name=telegram_user.get("last_name"),
                referrer_id=_referrer_from_start_param(db, start_param, user_id),
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                # Another request registered the same user first
                db.rollback()
                return get_user(db, user_id)
            db.refresh(user)
            logger.info(f"Registered Telegram user: user_id={user_id}, referrer_id={user.referrer_id}")
            return user

        changed = False
        for field in ("username", "first_name", "last_name"):
            value = telegram_user.get(field)
            if value is not None and getattr(user, field) != value:
                setattr(user, field, value)
                changed = True
        if changed:
            db.commit()
            db.refresh(user)
        return user
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not load Telegram user {user_id}") from e


PROFILE_FIELDS = ("username", "first_name", "last_name")


def update_profile(db: Session, user_id: int, changes: Dict) -> User:
    """
    Update the user's own display profile.

    Only username, first_name and last_name are writable; balance, role,
    referrer and created_at never change here.

    Raises:
        NotFoundError: no such user
        ConflictError: username already belongs to another user
    """
    user = get_user(db, user_id)
    updates = {field: changes[field] for field in PROFILE_FIELDS if field in changes}
    if not updates:
        return user

    username = updates.get("username")
    if username is not None:
        taken = (
            db.query(User.id)
            .filter(User.username == username, User.id != user_id)
            .first()
        )
        if taken is not None:
            raise ConflictError(f"Username {username} is already taken")

    try:
        for field, value in updates.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        # Lost a race for the same username
        db.rollback()
        raise ConflictError(f"Username {username} is already taken") from None
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not update profile for user {user_id}") from e

    logger.info(f"Profile updated: user_id={user_id}, fields={sorted(updates)}")
    return user
