from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gigboard.core.errors import ConflictError
from gigboard.core.security import hash_password, verify_password
from gigboard.db.session import atomic
from gigboard.models.user import User
from gigboard.policies.ownership import Principal

EMAIL_TAKEN_MESSAGE = "An account with this email already exists"


def principal_for(user: User) -> Principal:
    return Principal(user_id=str(user.id), name=user.name, email=user.email)


def register(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    avatar: Optional[str] = None,
) -> User:
    user = User(
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=hash_password(password),
        avatar=avatar,
    )
    try:
        with atomic(db):
            db.add(user)
    except IntegrityError as e:
        raise ConflictError(EMAIL_TAKEN_MESSAGE) from e
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> Principal | None:
    user = db.execute(
        select(User).where(User.email == email.strip().lower())
    ).scalar_one_or_none()

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return principal_for(user)
