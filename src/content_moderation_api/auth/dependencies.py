"""Authentication dependencies for FastAPI endpoints."""

import logging

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi import HTTPException
from fastapi import Request
from fastapi import status

from content_moderation_api.auth.models import Caller
from content_moderation_api.errors import ErrorKind

logger = logging.getLogger(__name__)

CALLER_ID_HEADER = "X-Caller-Id"
CAPABILITIES_HEADER = "X-Caller-Capabilities"


def _parse_capabilities(raw: str | None) -> frozenset[str]:
    if not raw:
        return frozenset()
    return frozenset(part.strip().lower() for part in raw.split(",") if part.strip())


async def get_current_caller(request: Request) -> Caller:
    """Get the caller asserted by the authorization gateway."""
    caller_id = request.headers.get(CALLER_ID_HEADER)
    if not caller_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "kind": ErrorKind.UNAUTHENTICATED.value,
                "message": "Caller identity required",
            },
        )

    try:
        caller_pk = UUID(caller_id)
    except ValueError:
        logger.warning(f"Malformed caller id header: {caller_id!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "kind": ErrorKind.UNAUTHENTICATED.value,
                "message": "Invalid caller identity",
            },
        ) from None

    return Caller(
        pk=caller_pk,
        capabilities=_parse_capabilities(request.headers.get(CAPABILITIES_HEADER)),
    )


async def require_moderator(
    caller: Annotated[Caller, Depends(get_current_caller)],
) -> Caller:
    """Require the moderation capability."""
    if not caller.can_moderate:
        logger.warning(f"Caller {caller.pk} lacks moderation capability")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "kind": ErrorKind.FORBIDDEN.value,
                "message": "Moderation capability required",
            },
        )
    return caller
