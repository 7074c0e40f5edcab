"""Notification endpoint used by other components to reach a user."""

from fastapi import APIRouter

from banqa.api.deps import CurrentContext, DBSession
from banqa.schemas.notification import NotificationCreate, NotificationRead, NotificationResponse
from banqa.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("", response_model=NotificationResponse, status_code=201)
async def send_notification(
    request: NotificationCreate,
    session: DBSession,
    ctx: CurrentContext,
):
    async with session.begin():
        notification = await NotificationService().send_notification(
            session,
            request.user_id,
            title=request.title,
            body=request.body,
            type=request.type,
            details=request.metadata,
        )
        await session.refresh(notification)
    return NotificationResponse(notification=NotificationRead.model_validate(notification))
