import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from galynx.application.services import CommandDispatcher, bootstrap
from galynx.core.config import Config
from galynx.core.logging import configure_logging
from galynx.shared.exceptions import ConfigurationError


def main() -> int:
    """CLI entry point for the Galynx desktop core

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    load_dotenv()

    try:
        config = Config.from_env()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    configure_logging(config.log_level, config.data_dir / "logs")

    async def run() -> int:
        client = await bootstrap(config)
        try:
            dispatcher = CommandDispatcher(client)
            return await dispatcher.dispatch(sys.argv)
        finally:
            await client.aclose()

    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
        return 130
    except Exception as e:
        logger.opt(exception=e).critical(f"Unhandled exception: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
