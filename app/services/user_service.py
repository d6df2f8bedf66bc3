"""User service for admin user management."""

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.enums import UserRole
from app.models.user import User
from app.schemas.user import UserProfileUpdate
from app.services.auth import get_password_hash, get_user_by_username

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    """
    Get a user by ID.

    Raises:
        HTTPException: If the user does not exist

    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def list_users(db: Session, search: str | None = None) -> list[User]:
    """
    List users with admins first, then alphabetically by username.

    Args:
        db: Database session
        search: Optional case-insensitive term matched against the username
            and the linked flat's number and owner/tenant names

    """
    users = db.query(User).all()

    term = (search or "").strip().lower()
    if term:
        users = [u for u in users if term in _searchable_text(u)]

    return sorted(users, key=lambda u: (u.role != UserRole.ADMIN, u.username.lower()))


def _searchable_text(user: User) -> str:
    parts = [user.username]
    if user.flat:
        parts.extend(
            p for p in (user.flat.flat_number, user.flat.owner_name, user.flat.tenant_name) if p
        )
    return " ".join(parts).lower()


def update_profile(db: Session, user_id: int, data: UserProfileUpdate) -> User:
    """
    Rename a user and/or set the owner name on the user's flat.

    Raises:
        HTTPException: If the new username is empty or already taken

    """
    user = get_user(db, user_id)

    if data.username is not None:
        new_username = data.username.strip()
        if not new_username:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username cannot be empty.",
            )
        if new_username != user.username:
            existing = get_user_by_username(db, new_username)
            if existing and existing.id != user.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Username already registered",
                )
            logger.info("Renaming user %s to %s", user.username, new_username)
            user.username = new_username

    if data.owner_name is not None and user.flat is not None:
        user.flat.owner_name = data.owner_name.strip() or None

    db.commit()
    db.refresh(user)
    return user


def reset_password(db: Session, user_id: int, new_password: str) -> User:
    """
    Replace a user's password.

    Raises:
        HTTPException: If the new password is empty

    """
    if not new_password.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password cannot be empty.",
        )

    user = get_user(db, user_id)
    user.hashed_password = get_password_hash(new_password)
    db.commit()
    db.refresh(user)
    logger.info("Password reset for user %s", user.username)
    return user


def deactivate_user(db: Session, user_id: int) -> None:
    """Deactivate a user so they can no longer log in."""
    user = get_user(db, user_id)
    user.is_active = False
    db.commit()
    logger.info("Deactivated user %s", user.username)
