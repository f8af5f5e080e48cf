import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from ..security_utils import create_jwt_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


def issue_token(user: User) -> dict:
    """Access token plus the user profile, as returned by register and login"""
    token = create_jwt_token({"sub": str(user.id), "role": user.role})
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create a staff account with the default role and sign it in"""
    logger.info(f"📥 Registration attempt for username: {data.username}")

    if db.query(User).filter(User.username == data.username).first():
        raise HTTPException(status_code=400, detail="Username already exists")
    if db.query(User).filter(func.lower(User.email) == data.email.lower()).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        username=data.username,
        email=data.email,
        password=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"✅ User registered: {user.username} (id={user.id})")
    return issue_token(user)


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange username (or email) and password for a bearer token"""
    user = (
        db.query(User)
        .filter(or_(User.username == data.username, func.lower(User.email) == data.username.lower()))
        .first()
    )
    if not user or not verify_password(data.password, user.password):
        logger.warning(f"🚫 Failed login for: {data.username}")
        raise HTTPException(status_code=401, detail="Invalid username or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    logger.info(f"🔑 User logged in: {user.username}")
    return issue_token(user)


@router.get("/user", response_model=UserResponse)
async def get_user(current_user: User = Depends(get_current_user)):
    """Get the signed-in user's profile"""
    return current_user
