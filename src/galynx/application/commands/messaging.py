from loguru import logger

from galynx.application.commands.base import (
    ChannelsCommand,
    MessagesCommand,
    SendCommand,
    report_error,
)
from galynx.infrastructure.api import GalynxClient
from galynx.shared.exceptions import ApiError


async def handle_channels(client: GalynxClient, command: ChannelsCommand) -> int:
    """List channels

    Args:
        client: GalynxClient instance
        command: ChannelsCommand

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        channels = await client.list_channels()
    except ApiError as e:
        return report_error("Channel list", e)

    logger.info(f"{len(channels)} channels")
    for channel in channels:
        marker = " (private)" if channel.is_private else ""
        logger.info(f"  {channel.id}  #{channel.name}{marker}")
    return 0


async def handle_messages(client: GalynxClient, command: MessagesCommand) -> int:
    """List one page of messages in a channel"""
    try:
        page = await client.list_messages(
            command.channel_id, limit=command.limit, cursor=command.cursor
        )
    except ApiError as e:
        return report_error("Message list", e)

    for message in page.items:
        logger.info(f"  [{message.created_at}] {message.sender_id}: {message.body_md}")
    if page.next_cursor:
        logger.info(f"More messages available, cursor={page.next_cursor}")
    return 0


async def handle_send(client: GalynxClient, command: SendCommand) -> int:
    """Send a message to a channel"""
    try:
        message = await client.send_message(command.channel_id, command.body_md)
    except ApiError as e:
        return report_error("Send", e)

    logger.info(f"Message sent: {message.id}")
    return 0
