"""Owner account routes: signup and bearer token issue."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from wedvite.core.database import get_session
from wedvite.core.security import (
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)
from wedvite.models import User
from wedvite.schemas import SignupRequest, TokenResponse, UserRead

router = APIRouter(prefix="/api/auth", tags=["auth"])

logger = logging.getLogger(__name__)


@router.post("/signup", status_code=201)
async def signup(body: SignupRequest, session: Session = Depends(get_session)):
    """
    Create an owner account.

    Returns 409 if the email is already registered.
    """
    existing = session.exec(select(User).where(User.email == body.email)).first()
    if existing:
        raise HTTPException(status_code=409, detail="User with this email already exists")

    user = User(name=body.name, email=body.email, password_hash=hash_password(body.password))
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"Created user {user.id}")
    return {"message": "Account created", "user": UserRead.model_validate(user)}


@router.post("/token")
async def issue_token(
    form: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    """
    Exchange email and password for a bearer token.

    Uses the OAuth2 password form, so ``username`` carries the email.
    """
    email = form.username.strip().lower()
    user = session.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(form.password, user.password_hash):
        raise HTTPException(
            status_code=401,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(access_token=create_access_token(user.id))


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """Return the signed-in owner."""
    return UserRead.model_validate(user)
