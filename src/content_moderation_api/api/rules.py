"""Rule configuration API endpoints."""

from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends

from content_moderation_api.api.dependencies import get_rules_engine
from content_moderation_api.auth.dependencies import require_moderator
from content_moderation_api.auth.models import Caller
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.database.models.moderation_rule import RuleConfiguration
from content_moderation_api.database.models.moderation_rule import (
    RuleConfigurationUpdate,
)
from content_moderation_api.services.rules_engine import RulesEngine

router = APIRouter(prefix="/moderation/rules", tags=["moderation-rules"])


@router.get("/{content_type}", response_model=RuleConfiguration)
async def get_rules(
    content_type: ContentType,
    moderator: Annotated[Caller, Depends(require_moderator)],
    rules_engine: Annotated[RulesEngine, Depends(get_rules_engine)],
):
    """Get the rule configuration of a content type."""
    return await rules_engine.get_configuration(content_type)


@router.put("/{content_type}", response_model=RuleConfiguration)
async def update_rules(
    content_type: ContentType,
    update: RuleConfigurationUpdate,
    moderator: Annotated[Caller, Depends(require_moderator)],
    rules_engine: Annotated[RulesEngine, Depends(get_rules_engine)],
):
    """Replace the rule configuration of a content type."""
    return await rules_engine.set_configuration(content_type, update)
