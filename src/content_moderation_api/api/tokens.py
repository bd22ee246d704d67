"""Moderation token API endpoints."""

from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import status

from content_moderation_api.api.dependencies import get_token_service
from content_moderation_api.auth.dependencies import require_moderator
from content_moderation_api.auth.models import Caller
from content_moderation_api.database.models.moderation_token import ModerationToken
from content_moderation_api.database.models.moderation_token import TokenIssueRequest
from content_moderation_api.database.models.moderation_token import (
    TokenValidateRequest,
)
from content_moderation_api.database.models.moderation_token import TokenValidation
from content_moderation_api.errors import ErrorKind
from content_moderation_api.services.token_service import TokenService

router = APIRouter(prefix="/moderation/tokens", tags=["moderation-tokens"])

TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


@router.post("", response_model=ModerationToken, status_code=status.HTTP_201_CREATED)
async def issue_token(
    request: TokenIssueRequest,
    moderator: Annotated[Caller, Depends(require_moderator)],
    token_service: TokenServiceDep,
):
    """Issue a moderation token for a content item."""
    return await token_service.issue(
        request.content_type,
        request.content_id,
        issuer_pk=moderator.pk,
        ttl_hours=request.ttl_hours,
        max_uses=request.max_uses,
        reason=request.reason,
    )


@router.post("/validate", response_model=TokenValidation)
async def validate_token(
    request: TokenValidateRequest,
    token_service: TokenServiceDep,
):
    """Validate a token and record one use of it."""
    return await token_service.validate(request.token)


@router.delete("/{token}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_token(
    token: str,
    moderator: Annotated[Caller, Depends(require_moderator)],
    token_service: TokenServiceDep,
):
    """Revoke a token."""
    if not await token_service.revoke(token):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"kind": ErrorKind.NOT_FOUND.value, "message": "Token not found"},
        )
