"""Moderation token service for the Content Moderation API."""

import logging
import secrets

from datetime import UTC
from datetime import datetime
from datetime import timedelta
from uuid import UUID

from content_moderation_api.config.moderation import ModerationSettings
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.moderation_token import ModerationToken
from content_moderation_api.database.models.moderation_token import (
    ModerationTokenCreate,
)
from content_moderation_api.database.models.moderation_token import TokenError
from content_moderation_api.database.models.moderation_token import TokenValidation
from content_moderation_api.database.repositories.moderation_token import (
    ModerationTokenRepository,
)

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def generate_token() -> str:
    """Generate an opaque, URL-safe token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def check_token(token: ModerationToken | None, now: datetime) -> TokenError | None:
    """Return why a token is unusable, or None when it may be used."""
    if token is None:
        return TokenError.INVALID
    if token.revoked:
        return TokenError.REVOKED
    if now > token.expires_at:
        return TokenError.EXPIRED
    if (
        token.max_usage_count is not None
        and token.current_usage_count >= token.max_usage_count
    ):
        return TokenError.EXHAUSTED
    return None


class TokenService:
    """Issues, validates and revokes moderation tokens."""

    def __init__(
        self,
        token_repository: ModerationTokenRepository,
        settings: ModerationSettings,
    ):
        self.token_repository = token_repository
        self.settings = settings

    async def issue(
        self,
        content_type: ContentType,
        content_id: str,
        issuer_pk: UUID | None = None,
        ttl_hours: int | None = None,
        max_uses: int | None = None,
        reason: str | None = None,
    ) -> ModerationToken:
        """Issue a token for a content item."""
        ttl = ttl_hours if ttl_hours is not None else self.settings.token_ttl_hours
        token = await self.token_repository.create_token(
            ModerationTokenCreate(
                token=generate_token(),
                content_type=content_type,
                content_id=content_id,
                created_by_pk=issuer_pk,
                expires_at=datetime.now(UTC) + timedelta(hours=ttl),
                max_usage_count=max_uses
                if max_uses is not None
                else self.settings.token_max_uses,
                issued_reason=reason,
            )
        )
        logger.info(
            f"Issued moderation token for {content_type.value} {content_id}, "
            f"expires {token.expires_at.isoformat()}"
        )
        return token

    async def validate(self, token: str) -> TokenValidation:
        """Validate a token and record one use of it."""
        now = datetime.now(UTC)
        stored = await self.token_repository.get_by_token(token)

        error = check_token(stored, now)
        if error is not None or stored is None:
            return TokenValidation(valid=False, error=error or TokenError.INVALID)

        consumed = await self.token_repository.consume(token, now)
        if consumed is None:
            # Changed since the read; report its current state
            current = await self.token_repository.get_by_token(token)
            error = check_token(current, now) or TokenError.EXHAUSTED
            logger.warning(
                f"Token for {stored.content_type.value} {stored.content_id} "
                f"became unusable during validation: {error.value}"
            )
            return TokenValidation(valid=False, error=error)

        return TokenValidation(valid=True, token=consumed)

    async def revoke(self, token: str) -> bool:
        """Revoke a token. Returns False when the token does not exist."""
        revoked = await self.token_repository.revoke(token)
        if revoked:
            logger.info("Moderation token revoked")
        return revoked

    async def purge_expired(self, older_than: datetime) -> int:
        """Delete tokens that expired before the cutoff."""
        purged = await self.token_repository.purge_expired(older_than)
        if purged:
            logger.info(f"Purged {purged} expired moderation tokens")
        return purged
