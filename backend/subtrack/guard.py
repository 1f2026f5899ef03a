"""
Authorization guard.

require_role() builds a FastAPI dependency that extracts the bearer token,
verifies it, optionally enforces an exact role and attaches the verified
Claim to request.state before the route runs.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from subtrack.config import Settings, get_settings
from subtrack.errors import Forbidden, Unauthenticated
from subtrack.logging_config import get_logger, log_with_context
from subtrack.models.enums import Role
from subtrack.security import Claim, decode_token

logger = get_logger("auth")

# auto_error=False so a missing header becomes our 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def require_role(role: Optional[Role] = None):
    """Return a dependency admitting any authenticated user, or only `role`."""

    def guard(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        settings: Settings = Depends(get_settings),
    ) -> Claim:
        if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
            raise Unauthenticated("Token missing")

        claim = decode_token(credentials.credentials, settings)

        if role is not None and claim.role is not role:
            log_with_context(logger, "WARNING",
                "Role mismatch: {} required, {} presented".format(role.value, claim.role.value),
                context={"user_id": claim.user_id},
                extra_data={"path": request.url.path})
            raise Forbidden("Forbidden: Role mismatch")

        request.state.claim = claim
        return claim

    return guard


authenticated = require_role()
student_only = require_role(Role.STUDENT)
faculty_only = require_role(Role.FACULTY)
admin_only = require_role(Role.ADMIN)
