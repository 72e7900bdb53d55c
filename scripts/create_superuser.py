#!/usr/bin/env python3
"""Create the first SuperUser so the API can be administered.

Registration is itself SuperUser-only, so a fresh deployment needs one
account created out of band.

Usage:
    python scripts/create_superuser.py --email admin@example.com --name "Admin" \
        --organization ORG1 --gender Other

Exit codes:
    0 = user created (or already present)
    1 = creation failed
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from leavedesk.common.constants import GenderType, UserRole
from leavedesk.common.exceptions import AppException, ConflictError
from leavedesk.common.logging import setup_logging
from leavedesk.config import settings
from leavedesk.database import async_session_factory, dispose_engine, init_models
from leavedesk.users.schemas import UserRegister
from leavedesk.users.service import UserService

logger = logging.getLogger("create_superuser")


async def create_superuser(args: argparse.Namespace) -> int:
    if settings.AUTO_CREATE_TABLES:
        await init_models()

    payload = UserRegister(
        name=args.name,
        email=args.email,
        role=UserRole.super_user,
        organization=args.organization,
        gender=GenderType(args.gender),
    )
    try:
        async with async_session_factory() as session:
            try:
                user = await UserService.register_user(session, payload)
                await session.commit()
            except ConflictError:
                logger.info("User %s already exists, nothing to do", args.email)
                return 0
            except AppException as exc:
                logger.error("Could not create %s: %s", args.email, exc.detail)
                return 1
    finally:
        await dispose_engine()

    logger.info("SuperUser %s created with id %s", user.email, user.id)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a LeaveDesk SuperUser")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True)
    parser.add_argument("--organization", required=True, help="organization_id the user belongs to")
    parser.add_argument(
        "--gender",
        default=GenderType.other.value,
        choices=[g.value for g in GenderType],
    )
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)
    sys.exit(asyncio.run(create_superuser(args)))


if __name__ == "__main__":
    main()
