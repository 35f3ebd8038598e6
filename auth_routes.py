import logging
import secrets
import string
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr, Field
from pymongo.errors import DuplicateKeyError

import config
from database import create_document, get_db, now, oid, serialize_doc
from errors import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from permissions import authorize
from schemas import ROLE_CUSTOMER, USER_ACTIVE, USER_BLOCKED, CamelModel, User as UserSchema
from security import (
    Identity,
    clear_session_cookie,
    hash_password,
    issue_credential,
    set_session_cookie,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

MIN_PASSWORD_LENGTH = 6
TEMP_PASSWORD_ALPHABET = string.ascii_uppercase + string.digits


# Request models
class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    phone: Optional[str] = None
    address: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")


# Helpers
def public_user(doc: dict) -> dict:
    user = serialize_doc(doc)
    user.pop("password_hash", None)
    return user


def find_user_by_email(email: str) -> Optional[dict]:
    return get_db()["user"].find_one({"email": email.strip().lower()})


def generate_temp_password(length: int = 8) -> str:
    return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length))


def check_password_length(password: str, message: str = "Password must be at least 6 characters"):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(message)


def get_user_or_404(user_id: str) -> dict:
    user = get_db()["user"].find_one({"_id": oid(user_id)})
    if not user:
        raise NotFoundError("User not found")
    return user


# Auth
@router.post("/auth/register", status_code=201)
def register(req: RegisterRequest, response: Response):
    name = req.name.strip()
    if not name or not req.password:
        raise ValidationError("Name, email, and password are required")
    check_password_length(req.password)

    email = req.email.strip().lower()
    if find_user_by_email(email):
        raise ValidationError("Email already registered")

    user = UserSchema(
        name=name,
        email=email,
        password_hash=hash_password(req.password),
        phone=req.phone or "",
        address=req.address or "",
        role=ROLE_CUSTOMER,
        status=USER_ACTIVE,
    )
    try:
        user_id = create_document("user", user)
    except DuplicateKeyError:
        # Lost a race with a concurrent registration for the same email
        raise ValidationError("Email already registered")
    created = get_db()["user"].find_one({"_id": oid(user_id)})
    token = issue_credential(created)
    set_session_cookie(response, token)
    logger.info("Registered %s", email)
    return {"success": True, "message": "Registration successful", "user": public_user(created)}


@router.post("/auth/login")
def login(req: LoginRequest, response: Response):
    user = find_user_by_email(req.email)
    if not user:
        logger.warning("Login failed for unknown email %s", req.email)
        raise AuthenticationError("Invalid email or password")
    if user.get("status") == USER_BLOCKED:
        logger.warning("Blocked account %s attempted to login", user["email"])
        raise AuthorizationError("Your account has been blocked. Please contact support.")
    if not verify_password(req.password, user.get("password_hash")):
        logger.warning("Login failed for %s", user["email"])
        raise AuthenticationError("Invalid email or password")

    token = issue_credential(user)
    set_session_cookie(response, token)
    return {"success": True, "message": "Login successful", "user": public_user(user)}


@router.post("/auth/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"success": True, "message": "Logout successful"}


@router.get("/auth/me")
def me(identity: Identity = Depends(authorize)):
    user = get_user_or_404(identity.user_id)
    if user.get("status") == USER_BLOCKED:
        raise AuthorizationError("Your account has been blocked")
    return {"user": public_user(user)}


@router.post("/auth/forgot-password")
def forgot_password(req: ForgotPasswordRequest):
    user = find_user_by_email(req.email)
    if not user:
        # Same answer whether or not the email is registered
        return {"success": True, "message": "If that email is registered, password reset instructions have been sent"}

    temp_password = generate_temp_password()
    get_db()["user"].update_one(
        {"_id": user["_id"]},
        {"$set": {"password_hash": hash_password(temp_password), "password_reset_required": True, "updated_at": now()}},
    )
    # No mail transport is configured; the password is only surfaced in dev
    logger.warning("Temporary password issued for %s", user["email"])

    body = {"success": True, "message": "Password reset instructions have been sent to your email"}
    if config.EXPOSE_TEMP_PASSWORDS:
        body["temp_password"] = temp_password
    return body


# Profile
@router.get("/profile")
def get_profile(identity: Identity = Depends(authorize)):
    return {"user": public_user(get_user_or_404(identity.user_id))}


@router.put("/profile")
def update_profile(req: ProfileUpdateRequest, identity: Identity = Depends(authorize)):
    updates = {"updated_at": now()}
    if req.name:
        updates["name"] = req.name.strip()
    if req.phone is not None:
        updates["phone"] = req.phone
    if req.address is not None:
        updates["address"] = req.address

    result = get_db()["user"].update_one({"_id": oid(identity.user_id)}, {"$set": updates})
    if result.matched_count == 0:
        raise NotFoundError("User not found")
    return {"success": True, "message": "Profile updated successfully", "user": public_user(get_user_or_404(identity.user_id))}


@router.post("/profile/change-password")
def change_password(req: ChangePasswordRequest, identity: Identity = Depends(authorize)):
    if not req.current_password or not req.new_password:
        raise ValidationError("Current and new passwords are required")
    check_password_length(req.new_password, "New password must be at least 6 characters")

    user = get_user_or_404(identity.user_id)
    if not verify_password(req.current_password, user.get("password_hash")):
        raise ValidationError("Current password is incorrect")

    get_db()["user"].update_one(
        {"_id": user["_id"]},
        {"$set": {"password_hash": hash_password(req.new_password), "password_reset_required": False, "updated_at": now()}},
    )
    return {"success": True, "message": "Password changed successfully"}
