"""Services module for application layer"""

from galynx.application.services.bootstrap import (
    bootstrap,
    resolve_api_base,
    validate_stored_session,
)
from galynx.application.services.command_dispatcher import CommandDispatcher

__all__ = [
    "CommandDispatcher",
    "bootstrap",
    "resolve_api_base",
    "validate_stored_session",
]
