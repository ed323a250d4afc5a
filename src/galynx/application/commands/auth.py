from loguru import logger

from galynx.application.commands.base import (
    LoginCommand,
    LogoutCommand,
    MeCommand,
    report_error,
)
from galynx.infrastructure.api import GalynxClient
from galynx.shared.exceptions import ApiError


async def handle_login(client: GalynxClient, command: LoginCommand) -> int:
    """Sign in and persist the session

    Args:
        client: GalynxClient instance
        command: LoginCommand with credentials

    Returns:
        Exit code (0 for success, 1 for error)
    """
    logger.info(f"Signing in as {command.email}")
    try:
        session = await client.login(command.email, command.password)
    except ApiError as e:
        return report_error("Login", e)

    user = session.user
    logger.info(f"Signed in: {user.name} <{user.email}> ({user.role})")
    return 0


async def handle_me(client: GalynxClient, command: MeCommand) -> int:
    """Show the signed-in user"""
    try:
        user = await client.me()
    except ApiError as e:
        return report_error("Profile lookup", e)

    logger.info(f"{user.name} <{user.email}> workspace={user.workspace_id}")
    return 0


async def handle_logout(client: GalynxClient, command: LogoutCommand) -> int:
    """Sign out and clear stored tokens"""
    try:
        await client.logout()
    except ApiError as e:
        return report_error("Logout", e)

    logger.info("Signed out")
    return 0
