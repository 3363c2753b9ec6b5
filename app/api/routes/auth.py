"""
Session endpoints.

Sign-in itself happens in the auth dependency (Telegram initData or bearer
token); this router exposes who the caller is and lets them edit their
display profile.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_user_id, get_current_user_obj, get_db
from app.db.models.user import User
from app.schemas.auth import MeResponse, UpdateProfileRequest, UserResponse
from app.services.user_service import update_profile

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        balance=user.balance,
        referrer_id=user.referrer_id,
        created_at=user.created_at,
    )


@router.get("/me", response_model=MeResponse, status_code=status.HTTP_200_OK)
def get_me(user: User = Depends(get_current_user_obj)):
    """
    Get the authenticated user's profile and balance.

    First-time Telegram users are registered by the auth dependency before
    this runs.
    """
    return MeResponse(user=_user_response(user))


@router.post("/update", response_model=MeResponse, status_code=status.HTTP_200_OK)
def update_me(
    request: UpdateProfileRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Update the authenticated user's username and display names.

    Returns 409 when the username belongs to someone else.
    """
    user = update_profile(db, user_id, request.model_dump(exclude_unset=True))
    return MeResponse(user=_user_response(user))
