from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import structlog
from config import get_settings
from database import get_db, Category, Expense, Profile, User
from schemas import ProfileResponse, ProfileUpdate
from auth import get_current_user

logger = structlog.get_logger(__name__)

settings_router = APIRouter()


def _get_or_create_profile(db: Session, user: User) -> Profile:
    profile = db.query(Profile).filter(Profile.id == user.id).first()
    if profile is None:
        profile = Profile(id=user.id, user_id=user.id)
        db.add(profile)
    return profile


def _profile_response(user: User, profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        email=user.email,
        app_name=profile.app_name or get_settings().default_app_name,
    )


@settings_router.get("/profile", response_model=ProfileResponse)
def get_profile(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    profile = db.query(Profile).filter(Profile.id == current_user.id).first()
    if profile is None:
        profile = Profile(id=current_user.id, user_id=current_user.id)
    return _profile_response(current_user, profile)


@settings_router.put("/profile", response_model=ProfileResponse)
def rename_app(
    update: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    app_name = update.app_name.strip()
    if not app_name:
        raise HTTPException(status_code=400, detail="App name cannot be empty")

    profile = _get_or_create_profile(db, current_user)
    profile.app_name = app_name
    db.commit()

    logger.info("app_renamed", user_id=current_user.id)
    return _profile_response(current_user, profile)


@settings_router.delete("/account")
def delete_account(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    """
    Permanently removes the user and everything they own: expenses,
    categories and profile. There is no undo.
    """
    user_id = current_user.id
    db.query(Expense).filter(Expense.user_id == user_id).delete(
        synchronize_session=False
    )
    db.query(Category).filter(Category.user_id == user_id).delete(
        synchronize_session=False
    )
    db.query(Profile).filter(Profile.user_id == user_id).delete(
        synchronize_session=False
    )
    db.delete(current_user)
    db.commit()

    logger.info("account_deleted", user_id=user_id)
    return {"message": "Account deleted successfully"}
