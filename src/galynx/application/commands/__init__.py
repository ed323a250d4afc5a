from galynx.application.commands.base import (
    ApiBaseCommand,
    ChannelsCommand,
    Command,
    ListenCommand,
    LoginCommand,
    LogoutCommand,
    MeCommand,
    MessagesCommand,
    SendCommand,
)

__all__ = [
    "Command",
    "LoginCommand",
    "MeCommand",
    "LogoutCommand",
    "ChannelsCommand",
    "MessagesCommand",
    "SendCommand",
    "ApiBaseCommand",
    "ListenCommand",
]
