from dataclasses import dataclass

from loguru import logger

from galynx.shared.exceptions import ApiError, ApiErrorDto


@dataclass
class Command:
    """Base command class"""

    name: str


@dataclass
class LoginCommand(Command):
    """Sign in with email and password"""

    email: str = ""
    password: str = ""


@dataclass
class MeCommand(Command):
    """Show the signed-in user"""


@dataclass
class LogoutCommand(Command):
    """Sign out and clear stored tokens"""


@dataclass
class ChannelsCommand(Command):
    """List channels"""


@dataclass
class MessagesCommand(Command):
    """List one page of channel messages"""

    channel_id: str = ""
    limit: int | None = None
    cursor: str | None = None


@dataclass
class SendCommand(Command):
    """Send a message to a channel"""

    channel_id: str = ""
    body_md: str = ""


@dataclass
class ApiBaseCommand(Command):
    """Show or change the API base"""

    api_base: str | None = None


@dataclass
class ListenCommand(Command):
    """Stream realtime events until interrupted"""

    duration: float | None = None


def report_error(action: str, err: ApiError) -> int:
    """Log an operation failure in its frontend shape and return exit code 1"""
    dto = ApiErrorDto.from_error(err)
    logger.error(f"{action} failed ({dto.status} {dto.error}): {dto.message}")
    return 1
