"""User management API routes (admin only)."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import require_admin
from app.core.database import get_db
from app.models.user import User
from app.schemas.user import PasswordReset, UserCreate, UserProfileUpdate, UserResponse
from app.services import user_service
from app.services.auth import create_user as create_user_account

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_admin)])


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user_data: UserCreate, db: Session = Depends(get_db)) -> UserResponse:
    """Create a tenant (linked to a flat) or an admin."""
    user = create_user_account(db, user_data)
    return UserResponse.model_validate(user)


@router.get("/", response_model=list[UserResponse])
def list_users(
    search: str | None = Query(None, description="Match username, flat number or name"),
    db: Session = Depends(get_db),
) -> list[UserResponse]:
    """List users, admins first."""
    return [UserResponse.model_validate(u) for u in user_service.list_users(db, search)]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db)) -> UserResponse:
    """Get a user by ID."""
    return UserResponse.model_validate(user_service.get_user(db, user_id))


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserProfileUpdate,
    db: Session = Depends(get_db),
) -> UserResponse:
    """Change a username and/or the owner name on the user's flat."""
    return UserResponse.model_validate(user_service.update_profile(db, user_id, data))


@router.post("/{user_id}/password", response_model=UserResponse)
def reset_password(
    user_id: int,
    data: PasswordReset,
    db: Session = Depends(get_db),
) -> UserResponse:
    """Set a new password for a user."""
    return UserResponse.model_validate(
        user_service.reset_password(db, user_id, data.new_password)
    )


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> None:
    """Deactivate a user."""
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate your own account",
        )
    user_service.deactivate_user(db, user_id)
