# barber_agenda/routers/users_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barber_agenda.auth import get_current_user, hash_password
from barber_agenda.deps import get_session
from barber_agenda.models import User
from barber_agenda.notifications import normalize_phone
from barber_agenda.schemas import UserCreate, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    # 1) Check if email already exists
    existing = session.exec(
        select(User).where(User.email == user.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Self-registration always creates a client; admins come from settings
    db_user = User(
        email=user.email,
        username=user.username,
        phone=normalize_phone(user.phone) or None,
        password_hash=hash_password(user.password),
        role="client",
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id
    logger.info("Registered client %s", db_user.email)

    return db_user


@router.delete("/me", status_code=204)
def delete_me(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if current_user["role"] == "admin":
        raise HTTPException(status_code=409, detail="The admin account cannot delete itself")

    # Appointments are kept; they belong to the shop's history
    db_user = session.get(User, current_user["id"])
    session.delete(db_user)
    session.commit()
    logger.info("Deleted account %s", current_user["email"])
