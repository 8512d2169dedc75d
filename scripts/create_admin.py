"""
Create an admin account for the console.

Registers an email/password credential with the identity provider and writes
its `users` role document with role "admin". Uses the same settings as the
API service, so point FIREBASE_PROJECT_ID / GOOGLE_APPLICATION_CREDENTIALS at
the target project first.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from admin_backend.auth import register_user
from admin_backend.config import get_settings
from admin_backend.dependencies import get_identity_provider, get_user_manager
from content.entities import UserRole


logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a console admin account")
    parser.add_argument("email", help="Email address for the new admin")
    parser.add_argument(
        "--password",
        default=None,
        help="Password for the account (prompted for when omitted)",
    )
    parser.add_argument(
        "--role",
        choices=[role.value for role in UserRole],
        default=UserRole.ADMIN.value,
        help="Role to store for the account",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.firebase_configured:
        # In-memory backends would drop the account when the process exits.
        logger.error(
            "Firebase is not configured: set FIREBASE_PROJECT_ID or "
            "GOOGLE_APPLICATION_CREDENTIALS and unset USE_IN_MEMORY_BACKENDS"
        )
        return 1

    password = args.password or getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        logger.error("Password must be at least %d characters", MIN_PASSWORD_LENGTH)
        return 1

    result = register_user(
        args.email,
        password,
        args.role,
        identity=get_identity_provider(),
        users=get_user_manager(),
    )
    if not result.success:
        logger.error("Could not create %s: %s", args.email, result.error)
        return 1

    logger.info("Created %s account %s (uid %s)", args.role, args.email, result.user.uid)
    return 0


if __name__ == "__main__":
    sys.exit(main())
