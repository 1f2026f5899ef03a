"""
Auth API routes - registration, login and the current user's profile.
"""

import re
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field, field_validator

from subtrack.dependencies import get_identity_service
from subtrack.guard import authenticated
from subtrack.models.enums import Role
from subtrack.security import Claim
from subtrack.serializers import serialize_user
from subtrack.services.identity import IdentityService

router = APIRouter(prefix="/auth")

PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


# ── Pydantic schemas ─────────────────────────────────────────

class RegisterRequest(BaseModel):
    """Schema for account registration."""
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Optional[Role] = Field(None, description="Defaults to student")
    dept: Optional[str] = Field(None, max_length=50)
    year: Optional[str] = Field(None, max_length=20)

    @field_validator("name", "dept", "year", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        if not PASSWORD_RULE.match(value):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return value


class LoginRequest(BaseModel):
    """Schema for login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


@router.post("/register", status_code=201)
def register(request: RegisterRequest,
             identity: IdentityService = Depends(get_identity_service)):
    """Create an account. Role defaults to student."""
    user = identity.register(
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.role or Role.STUDENT,
        dept=request.dept or "",
        year=request.year or "",
    )
    return {"success": True, "message": "Registered successfully", "userId": str(user.id)}


@router.post("/login")
def login(request: LoginRequest,
          identity: IdentityService = Depends(get_identity_service)):
    """Exchange credentials for a bearer token."""
    result = identity.login(request.email, request.password)
    return {"success": True, **result}


@router.get("/me")
def me(claim: Claim = Depends(authenticated),
       identity: IdentityService = Depends(get_identity_service)):
    user = identity.get_current_user(claim)
    return {"success": True, "user": serialize_user(user)}
