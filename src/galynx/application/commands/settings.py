from loguru import logger

from galynx.application.commands.base import ApiBaseCommand, report_error
from galynx.infrastructure.api import GalynxClient
from galynx.shared.exceptions import ApiError


async def handle_api_base(client: GalynxClient, command: ApiBaseCommand) -> int:
    """Show the API base, or persist a new one when given

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if command.api_base is None:
        logger.info(f"API base: {client.get_api_base()}")
        return 0

    try:
        api_base = await client.set_api_base(command.api_base)
    except ApiError as e:
        return report_error("API base update", e)

    logger.info(f"API base: {api_base}")
    return 0
