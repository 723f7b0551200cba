"""Shared dependencies for API routes."""
import uuid

from fastapi import Header

from kinisi.config.settings import get_settings
from kinisi.core.exceptions import AuthenticationError, NotFoundError


async def get_current_user_id(
    x_user_id: str | None = Header(None, alias="X-User-ID"),
) -> str:
    """Identify the caller.

    Authentication happens upstream; the gateway forwards the user id in
    ``X-User-ID``. For MVP: Falls back to default_user_id if no header is sent.
    """
    user_id = (x_user_id or "").strip() or get_settings().default_user_id
    if not user_id:
        raise AuthenticationError("No user identity provided")
    return user_id


def validate_program_id(program_id: str) -> str:
    """Program ids are UUIDs; anything else cannot exist."""
    try:
        return str(uuid.UUID(program_id))
    except (ValueError, AttributeError):
        raise NotFoundError("Program", "Program not found", {"program_id": program_id})
