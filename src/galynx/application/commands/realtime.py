import asyncio

from loguru import logger

from galynx.application.commands.base import ListenCommand, report_error
from galynx.domain.models.event import REALTIME_STATUS, Event, RealtimeStatus
from galynx.infrastructure.api import GalynxClient
from galynx.shared.exceptions import ApiError


async def handle_listen(client: GalynxClient, command: ListenCommand) -> int:
    """Stream realtime events to the log

    Runs until the loop goes offline, the optional duration elapses or
    the task is cancelled (Ctrl+C); the loop is always disconnected.

    Args:
        client: GalynxClient instance
        command: ListenCommand with optional duration in seconds

    Returns:
        Exit code (0 for success, 1 for error)
    """
    bus = client.event_bus
    offline = asyncio.Event()

    def log_event(event: Event) -> None:
        logger.info(f"{event.name}: {event.data}")

    def watch_status(event: Event) -> None:
        if event.data == RealtimeStatus.OFFLINE.to_payload():
            offline.set()

    bus.add_handler(log_event)
    bus.subscribe(REALTIME_STATUS, watch_status)
    await bus.start()
    try:
        await client.realtime_connect()
        logger.info("Listening for realtime events (Ctrl+C to stop)")
        try:
            await asyncio.wait_for(offline.wait(), timeout=command.duration)
        except TimeoutError:
            logger.info(f"Listen finished after {command.duration}s")
    except ApiError as e:
        return report_error("Listen", e)
    finally:
        await client.realtime_disconnect()
        await bus.stop()
        bus.unsubscribe(REALTIME_STATUS, watch_status)
        bus.remove_handler(log_event)

    return 0
