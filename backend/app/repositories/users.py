from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import User


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id.asc())))


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalars(select(User).where(User.email == email)).first()


def create_user(
    db: Session,
    *,
    email: str,
    name: str,
    role: str,
    language: str,
    theme: str,
) -> User:
    user = User(email=email, name=name, role=role, language=language, theme=theme)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(
    db: Session,
    user: User,
    *,
    email: str | None = None,
    name: str | None = None,
    role: str | None = None,
    language: str | None = None,
    theme: str | None = None,
) -> User:
    if email is not None:
        user.email = email
    if name is not None:
        user.name = name
    if role is not None:
        user.role = role
    if language is not None:
        user.language = language
    if theme is not None:
        user.theme = theme

    db.add(user)
    db.commit()
    db.refresh(user)
    return user
