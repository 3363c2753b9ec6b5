"""
Booster service: purchases, the combined earnings multiplier and listings.

Activation rows are the source of truth for a user's boosters. The combined
multiplier is computed from the type and multiplier copied onto each row at
purchase time, never from the live catalog.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.booster_catalog import (
    DURATION,
    ONE_TIME,
    PERMANENT,
    Booster,
    find_catalog_entry,
)
from app.core.clock import as_naive_utc
from app.core.errors import (
    CoreError,
    InsufficientBalanceError,
    PersistenceError,
    UnknownCatalogReferenceError,
)
from app.db.models.booster_activation import BoosterActivation
from app.services.ledger_service import stage_delta

logger = logging.getLogger(__name__)


@dataclass
class ActiveBooster:
    """Catalog entry merged with the state of one activation."""

    booster: Booster
    activation_id: str
    user_id: int
    activated_at: datetime
    expires_at: Optional[datetime]


def _expiry_for(booster: Booster, activated_at: datetime) -> Optional[datetime]:
    # oneTime and permanent boosters never expire by time
    if booster.type == DURATION:
        return activated_at + timedelta(milliseconds=booster.duration)
    return None


def purchase_booster(
    db: Session,
    user_id: int,
    booster_id: str,
    use_external_payment: bool = False,
    now: Optional[datetime] = None,
) -> bool:
    """
    Buy a catalog booster for the user.

    Args:
        db: Database session
        user_id: Buyer
        booster_id: Catalog id
        use_external_payment: Payment was settled out of band; skip the debit
        now: Clock override

    Returns:
        True when the activation was stored, False for an unknown booster or
        a balance below the price (nothing is written in either case).
    """
    booster = find_catalog_entry(booster_id)
    if booster is None:
        logger.warning(f"Purchase of unknown booster rejected: user_id={user_id}, booster_id={booster_id}")
        return False

    activated_at = as_naive_utc(now)
    activation = BoosterActivation(
        user_id=user_id,
        booster_id=booster.id,
        activated_at=activated_at,
        expires_at=_expiry_for(booster, activated_at),
        type=booster.type,
        multiplier=booster.multiplier,
    )

    try:
        if not use_external_payment:
            # Debit and activation commit together or not at all
            stage_delta(db, user_id, -booster.price)
        db.add(activation)
        db.commit()
    except InsufficientBalanceError:
        db.rollback()
        logger.info(
            f"Booster purchase declined, insufficient balance: user_id={user_id}, "
            f"booster_id={booster.id}, price={booster.price}"
        )
        return False
    except CoreError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Booster purchase failed for user {user_id}") from e

    logger.info(
        f"Booster purchased: user_id={user_id}, booster_id={booster.id}, "
        f"external_payment={use_external_payment}, activation_id={activation.id}"
    )
    return True


def _consume(db: Session, activation_id: str) -> bool:
    """Delete an activation row; False if another caller already removed it."""
    deleted = (
        db.query(BoosterActivation)
        .filter(BoosterActivation.id == activation_id)
        .delete(synchronize_session=False)
    )
    return deleted == 1


def active_multiplier(db: Session, user_id: int, now: Optional[datetime] = None) -> float:
    """
    Combined multiplier of the user's boosters. Mutates the activation set.

    Rules per activation, starting from 1:
    - permanent: multiply, keep the row
    - oneTime: multiply and delete the row. At most one one-time booster is
      spent per call; later one-time rows are skipped. Which one is spent
      depends on the order the database returns rows in.
    - duration: multiply while now <= expires_at, otherwise delete the row
      without multiplying

    A one-time row is only counted if this call is the one that deleted it.
    """
    now = as_naive_utc(now)
    total = 1.0
    expired = 0
    one_time_spent = False

    try:
        activations = (
            db.query(BoosterActivation)
            .filter(BoosterActivation.user_id == user_id)
            .all()
        )

        for activation in activations:
            if activation.type == PERMANENT:
                total *= activation.multiplier
                continue

            if activation.type == ONE_TIME:
                if not one_time_spent and _consume(db, activation.id):
                    total *= activation.multiplier
                    one_time_spent = True
                    logger.debug(
                        f"One-time booster consumed: user_id={user_id}, "
                        f"booster_id={activation.booster_id}"
                    )
                continue

            if activation.type == DURATION and activation.expires_at is not None:
                if now <= activation.expires_at:
                    total *= activation.multiplier
                elif _consume(db, activation.id):
                    expired += 1

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not combine boosters for user {user_id}") from e

    if expired:
        logger.info(f"Removed {expired} expired booster(s): user_id={user_id}")
    return total


def list_active_boosters(db: Session, user_id: int) -> List[ActiveBooster]:
    """
    The user's activations joined back to their catalog entries for display.

    Raises:
        UnknownCatalogReferenceError: an activation names a booster the
            catalog does not contain
    """
    activations = (
        db.query(BoosterActivation)
        .filter(BoosterActivation.user_id == user_id)
        .order_by(BoosterActivation.activated_at.asc())
        .all()
    )

    result = []
    for activation in activations:
        booster = find_catalog_entry(activation.booster_id)
        if booster is None:
            raise UnknownCatalogReferenceError(
                f"Booster {activation.booster_id} not found in available boosters"
            )
        result.append(ActiveBooster(
            booster=booster,
            activation_id=activation.id,
            user_id=activation.user_id,
            activated_at=activation.activated_at,
            expires_at=activation.expires_at,
        ))
    return result
