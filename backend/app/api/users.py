from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.repositories.users import create_user, get_user_by_id, list_users, update_user
from app.schemas.users import UserCreateRequest, UserResponse, UserUpdateRequest


router = APIRouter(prefix="/api", tags=["users"])


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createUser",
)
def post_user(payload: UserCreateRequest, db: Session = Depends(get_db)) -> UserResponse:
    try:
        user = create_user(
            db,
            email=payload.email,
            name=payload.name,
            role=payload.role,
            language=payload.language,
            theme=payload.theme,
        )
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User conflict: {exc.orig}",
        )
    return UserResponse.model_validate(user)


@router.get("/users", response_model=list[UserResponse], operation_id="getUsers")
def get_users(db: Session = Depends(get_db)) -> list[UserResponse]:
    return [UserResponse.model_validate(user) for user in list_users(db)]


@router.put("/users/{user_id}", response_model=UserResponse, operation_id="updateUser")
def put_user(
    user_id: int,
    payload: UserUpdateRequest,
    db: Session = Depends(get_db),
) -> UserResponse:
    if payload.id != user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Body id does not match path id")

    user = get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    updates = payload.model_dump(exclude_unset=True, exclude={"id"})
    try:
        updated = update_user(db, user, **updates)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User conflict: {exc.orig}",
        )
    return UserResponse.model_validate(updated)
