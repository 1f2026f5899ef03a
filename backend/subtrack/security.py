"""
Password hashing and session tokens.

Passwords are stored as bcrypt hashes. A successful login is handed a signed
JWT carrying userId, role and name, which decode_token turns back into a
Claim for the authorization guard.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from subtrack.config import Settings
from subtrack.errors import Unauthenticated
from subtrack.models.enums import Role


@dataclass(frozen=True)
class Claim:
    """Verified identity extracted from a session token."""

    user_id: str
    role: Role
    name: str


def get_password_hash(password: str, rounds: int = 10) -> str:
    """Hash password with bcrypt at the given cost"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = password.encode("utf-8")[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password"""
    password_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


def create_access_token(claim: Claim, settings: Settings,
                        expires_delta: Optional[timedelta] = None) -> str:
    """Sign a JWT carrying userId, role and name"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expire_minutes)
    to_encode: Dict[str, Any] = {
        "userId": claim.user_id,
        "role": claim.role.value,
        "name": claim.name,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Claim:
    """
    Verify signature and expiry and return the claim.

    Any failure, including a payload without the expected fields or with
    an unknown role, raises Unauthenticated("Invalid token").
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return Claim(
            user_id=str(payload["userId"]),
            role=Role(payload["role"]),
            name=str(payload.get("name", "")),
        )
    except (JWTError, KeyError, ValueError):
        raise Unauthenticated("Invalid token")
