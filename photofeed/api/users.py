"""
User API endpoints
Sign up, sign in, public profiles and account deletion
"""
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
import uuid

from photofeed.core.config import Settings
from photofeed.core.database import get_db
from photofeed.core.dependencies import (
    form_value,
    get_current_user,
    get_settings,
    profile_image_upload,
    read_body,
)
from photofeed.core.validation import validate_input
from photofeed.models.user import User
from photofeed.schemas.user import SigninResult, SignupResult, UserSignin, UserSignup
from photofeed.services.auth_service import AuthService
from photofeed.services.user_service import UserService
from photofeed.utils.responses import success_response

router = APIRouter()


def validate_signup(body: Dict[str, Any] = Depends(read_body)) -> UserSignup:
    return validate_input(UserSignup, {
        "name": form_value(body, "name"),
        "email": form_value(body, "email"),
        "password": form_value(body, "password"),
    })


def validate_signin(body: Dict[str, Any] = Depends(read_body)) -> UserSignin:
    return validate_input(UserSignin, {
        "email": form_value(body, "email"),
        "password": form_value(body, "password"),
    })


@router.post("/signup", response_model=dict, status_code=status.HTTP_201_CREATED)
def signup(
    profile_pic: Optional[str] = Depends(profile_image_upload),
    payload: UserSignup = Depends(validate_signup),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Register new user

    - **name**: Display name (3-50 characters)
    - **email**: Valid email address
    - **password**: Password (6-15 characters)
    - **profilePic**: Optional image file (JPEG, PNG or WEBP, up to 2MB)
    """
    user = AuthService.create_user(db, payload, profile_pic=profile_pic, rounds=settings.BCRYPT_ROUNDS)

    result = SignupResult(
        user_id=user.id,
        user_name=user.name,
        email=user.email,
        profile_pic=user.profile_pic,
    )
    return success_response(
        data=result.to_json(),
        message="User created successfully",
        status_code=status.HTTP_201_CREATED
    )


@router.post("/signin", response_model=dict)
def signin(
    payload: UserSignin = Depends(validate_signin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Sign in with email and password

    Returns a bearer token valid for JWT_EXPIRE_DAYS days.
    """
    user, token = AuthService.sign_in(db, payload, settings)

    result = SigninResult(
        user_id=user.id,
        user_name=user.name,
        token=token,
        profile_pic=user.profile_pic,
    )
    return success_response(data=result.to_json(), message="SignIn successful")


@router.get("/profile/{userId}", response_model=dict)
def get_profile(
    user_id: uuid.UUID = Path(..., alias="userId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Public profile of an active user with their posts"""
    profile = UserService.get_profile(db, user_id)
    return success_response(data=profile.to_json(), message="Profile fetched successfully")


@router.delete("/delete", response_model=dict)
def delete_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Soft delete your account and every post you have made"""
    UserService.delete_account(db, current_user)
    return success_response(message="Account and associated posts deleted successfully")
