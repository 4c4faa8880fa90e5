"""
Script to create a credential user with their default workspace for local testing.

Usage:
    python -m app.scripts.create_local_user --email ada@example.com --password secret1 --name Ada
"""

import argparse
import asyncio

import structlog
from fastapi import HTTPException

from app.core.database import get_session_context
from app.services import accounts as account_service
from app.services.users import get_user_by_email
from app.services.workspaces import list_user_workspaces
from nebula_shared.schemas.users import RegisterRequest

log = structlog.get_logger()


async def create_user(email: str, password: str, name: str) -> bool:
    """Register the user unless the email is taken. Returns True when created."""
    req = RegisterRequest(name=name, email=email, password=password)
    async with get_session_context() as session:
        try:
            user = await account_service.register_user(session, req)
        except HTTPException as exc:
            existing = await get_user_by_email(session, email)
            log.info("local_user.exists", email=email, detail=exc.detail)
            print(f"User {email} already exists ({existing.id}).")
            return False

        workspaces = await list_user_workspaces(session, user.id)
        print(f"Created user: {email} ({user.id})")
        for workspace in workspaces:
            print(f"  {workspace.role.value} of '{workspace.name}' ({workspace.id})")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a local user with a default workspace.")
    parser.add_argument("--email", required=True, help="Email address for the user")
    parser.add_argument("--password", required=True, help="Password for the user (min 6 chars)")
    parser.add_argument("--name", default="Local User", help="Display name")

    args = parser.parse_args()

    asyncio.run(create_user(args.email, args.password, args.name))
