"""
Identity Service - registration, login and current-user lookup.

Passwords are hashed with bcrypt; sessions are stateless JWTs carrying
{userId, role, name}. Login failures use one message for unknown email
and wrong password so accounts cannot be enumerated.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from subtrack.config import Settings
from subtrack.errors import Conflict, Unauthenticated
from subtrack.logging_config import get_logger, log_with_context
from subtrack.models.enums import Role
from subtrack.models.user import User
from subtrack.security import Claim, create_access_token, get_password_hash, verify_password

logger = get_logger("auth")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityService:

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def register(self, name: str, email: str, password: str,
                 role: Role = Role.STUDENT, dept: str = "", year: str = "") -> User:
        """Create a user; Conflict if the email is already registered."""
        if self.find_by_email(email):
            raise Conflict("Email already exists")

        user = User(
            name=name.strip(),
            email=normalize_email(email),
            password_hash=get_password_hash(password, self.settings.bcrypt_rounds),
            role=role,
            dept=(dept or "").strip(),
            year=(year or "").strip(),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            self.db.rollback()
            raise Conflict("Email already exists")
        self.db.refresh(user)

        log_with_context(logger, "INFO", "Registered {} {}".format(role.value, user.email),
                         context={"user_id": user.id})
        return user

    def login(self, email: str, password: str) -> dict:
        """Check credentials and issue a signed session token."""
        user = self.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            log_with_context(logger, "WARNING", "Failed login",
                             extra_data={"email": normalize_email(email)})
            raise Unauthenticated("Invalid credentials")

        token = create_access_token(Claim(user.id, user.role, user.name), self.settings)
        log_with_context(logger, "INFO", "Login {}".format(user.email),
                         context={"user_id": user.id})
        return {"token": token, "role": user.role.value, "name": user.name, "userId": user.id}

    def get_current_user(self, claim: Claim) -> User:
        user = self.db.get(User, claim.user_id)
        if user is None:
            raise Unauthenticated("User not found")
        return user
