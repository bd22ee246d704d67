"""Classifier check API endpoints."""

from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from pydantic import BaseModel
from pydantic import Field

from content_moderation_api.api.dependencies import get_classifier_service
from content_moderation_api.api.errors import error_to_http
from content_moderation_api.auth.dependencies import get_current_caller
from content_moderation_api.auth.models import Caller
from content_moderation_api.database.models.base import ContentType
from content_moderation_api.errors import ClassifierUnavailableError
from content_moderation_api.errors import ErrorKind
from content_moderation_api.errors import ModerationError
from content_moderation_api.services.classifier_service import ClassificationResult
from content_moderation_api.services.classifier_service import ClassifierService

router = APIRouter(prefix="/moderation/classify", tags=["moderation-classifier"])

ClassifierDep = Annotated[ClassifierService, Depends(get_classifier_service)]


class ClassifyRequest(BaseModel):
    """Content to check with the classifier."""

    content: str = Field(..., max_length=100_000)
    content_type: ContentType = ContentType.POST
    sensitivity_level: float | None = Field(None, ge=0.0, le=1.0)


@router.post("", response_model=ClassificationResult)
async def classify_content(
    request: ClassifyRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    classifier: ClassifierDep,
):
    """Check content with the classifier without queueing it."""
    try:
        return await classifier.classify(
            request.content, request.content_type, request.sensitivity_level
        )
    except ClassifierUnavailableError as e:
        raise error_to_http(
            ModerationError(
                kind=ErrorKind.CLASSIFIER_UNAVAILABLE,
                message=f"Content classifier unavailable: {e}",
            )
        ) from e


@router.get("/status")
async def classifier_status(
    caller: Annotated[Caller, Depends(get_current_caller)],
    classifier: ClassifierDep,
):
    """Report which classifier provider is active."""
    return classifier.status()
