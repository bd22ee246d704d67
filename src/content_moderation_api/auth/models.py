"""Caller identity as asserted by the upstream authorization gateway."""

from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict

MODERATE_CAPABILITY = "moderate"


class Caller(BaseModel):
    """Authenticated caller and its capabilities."""

    pk: UUID
    capabilities: frozenset[str] = frozenset()

    model_config = ConfigDict(frozen=True)

    @property
    def can_moderate(self) -> bool:
        return MODERATE_CAPABILITY in self.capabilities
