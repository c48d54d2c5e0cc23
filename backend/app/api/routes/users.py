"""
User management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.user import UserResponse, UserUpdate
from app.models.user import User
from app.core.security import get_password_hash
from app.api.dependencies import get_current_user

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_current_user(
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update email, password or home platoon."""
    sent = user_data.model_fields_set

    if "email" in sent and user_data.email and user_data.email != current_user.email:
        taken = db.query(User).filter(User.email == user_data.email, User.id != current_user.id).first()
        if taken:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already exists"
            )
        current_user.email = user_data.email
    if "password" in sent and user_data.password:
        current_user.hashed_password = get_password_hash(user_data.password)
    if "home_platoon" in sent:
        current_user.home_platoon = (user_data.home_platoon or "").strip() or None

    db.commit()
    db.refresh(current_user)
    return current_user
