from loguru import logger

from galynx.application.commands.auth import (
    handle_login,
    handle_logout,
    handle_me,
)
from galynx.application.commands.base import (
    ApiBaseCommand,
    ChannelsCommand,
    ListenCommand,
    LoginCommand,
    LogoutCommand,
    MeCommand,
    MessagesCommand,
    SendCommand,
)
from galynx.application.commands.messaging import (
    handle_channels,
    handle_messages,
    handle_send,
)
from galynx.application.commands.realtime import handle_listen
from galynx.application.commands.settings import handle_api_base
from galynx.infrastructure.api import GalynxClient


class CommandDispatcher:
    """Dispatches CLI commands to appropriate handlers"""

    def __init__(self, client: GalynxClient) -> None:
        self.client = client
        self._handlers = {
            "login": self._handle_login,
            "me": self._handle_me,
            "logout": self._handle_logout,
            "channels": self._handle_channels,
            "messages": self._handle_messages,
            "send": self._handle_send,
            "api-base": self._handle_api_base,
            "listen": self._handle_listen,
        }

    async def dispatch(self, argv: list[str]) -> int:
        """Parse and execute command

        Args:
            argv: Command line arguments (sys.argv)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        if len(argv) < 2:
            self._print_usage()
            return 1

        method = argv[1]
        handler = self._handlers.get(method)

        if handler is None:
            logger.error(f"Unknown command: {method}")
            self._print_usage()
            return 1

        return await handler(argv)

    def _print_usage(self) -> None:
        """Print available commands"""
        logger.error(
            "No command specified. Available: "
            f"{', '.join(self._handlers)}"
        )

    def _require(self, argv: list[str], count: int, usage: str) -> bool:
        if len(argv) < count + 2:
            logger.error(f"Usage: galynx {usage}")
            return False
        return True

    async def _handle_login(self, argv: list[str]) -> int:
        """Handle login command"""
        if not self._require(argv, 2, "login EMAIL PASSWORD"):
            return 1
        command = LoginCommand(name="login", email=argv[2], password=argv[3])
        return await handle_login(self.client, command)

    async def _handle_me(self, argv: list[str]) -> int:
        """Handle me command"""
        return await handle_me(self.client, MeCommand(name="me"))

    async def _handle_logout(self, argv: list[str]) -> int:
        """Handle logout command"""
        return await handle_logout(self.client, LogoutCommand(name="logout"))

    async def _handle_channels(self, argv: list[str]) -> int:
        """Handle channels command"""
        return await handle_channels(self.client, ChannelsCommand(name="channels"))

    async def _handle_messages(self, argv: list[str]) -> int:
        """Handle messages command"""
        if not self._require(argv, 1, "messages CHANNEL_ID [LIMIT] [CURSOR]"):
            return 1
        limit = None
        if len(argv) > 3:
            try:
                limit = int(argv[3])
            except ValueError:
                logger.error(f"LIMIT must be an integer, got {argv[3]!r}")
                return 1
        cursor = argv[4] if len(argv) > 4 else None
        command = MessagesCommand(
            name="messages", channel_id=argv[2], limit=limit, cursor=cursor
        )
        return await handle_messages(self.client, command)

    async def _handle_send(self, argv: list[str]) -> int:
        """Handle send command"""
        if not self._require(argv, 2, "send CHANNEL_ID TEXT"):
            return 1
        command = SendCommand(
            name="send", channel_id=argv[2], body_md=" ".join(argv[3:])
        )
        return await handle_send(self.client, command)

    async def _handle_api_base(self, argv: list[str]) -> int:
        """Handle api-base command"""
        api_base = argv[2] if len(argv) > 2 else None
        command = ApiBaseCommand(name="api-base", api_base=api_base)
        return await handle_api_base(self.client, command)

    async def _handle_listen(self, argv: list[str]) -> int:
        """Handle listen command"""
        duration = None
        if len(argv) > 2:
            try:
                duration = float(argv[2])
            except ValueError:
                logger.error(f"SECONDS must be a number, got {argv[2]!r}")
                return 1
        command = ListenCommand(name="listen", duration=duration)
        return await handle_listen(self.client, command)
