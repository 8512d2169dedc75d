"""
Registration and the admin-role check.

Nothing here raises past the module boundary: registration returns a
`RegistrationResult` and the role check returns a boolean.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from admin_backend.identity import AuthError, AuthUser, IdentityProvider
from admin_backend.store import StoreError
from content.entities import UserRole
from managers.users import UserManager

logger = logging.getLogger(__name__)


@dataclass
class RegistrationResult:
    success: bool
    user: Optional[AuthUser] = None
    error: Optional[str] = None


def register_user(
    email: str,
    password: str,
    role: str = UserRole.USER.value,
    *,
    identity: IdentityProvider,
    users: UserManager,
) -> RegistrationResult:
    """
    Creates a credential and the matching role document.

    A failure in either step yields `success=False` with the error message.
    """
    try:
        user = identity.create_user(email, password)
        users.create_with_role(user.uid, email, role)
    except (AuthError, StoreError, ValueError) as e:
        logger.error("Error registering user %s: %s", email, e)
        return RegistrationResult(success=False, error=str(e))
    logger.info("Registered %s with role %s", email, role)
    return RegistrationResult(success=True, user=user)


def verify_admin_access(user: Optional[AuthUser], users: UserManager) -> bool:
    """Returns whether the signed-in user's role document says admin."""
    if user is None:
        logger.debug("No user provided to verify_admin_access")
        return False
    try:
        is_admin = users.has_admin_role(user.uid)
    except StoreError:
        logger.exception("Error verifying admin access for %s", user.email)
        return False
    logger.info("Role check for %s: admin=%s", user.email, is_admin)
    return is_admin
