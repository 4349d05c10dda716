from __future__ import annotations

from fastapi import APIRouter, Depends

from notification_limiter.core.rate_limit import enforce_notification_rate_limit
from notification_limiter.schemas.notifications import NotificationAdmissionResponse

router = APIRouter(tags=["Notifications"])


@router.post(
    "/notifications/{user_id}/admit",
    response_model=NotificationAdmissionResponse,
)
async def admit_notification(
    user_id: str = Depends(enforce_notification_rate_limit),
) -> NotificationAdmissionResponse:
    """Reserve one notification slot for a user.

    Senders call this before dispatching a notification. Throttled users get
    HTTP 429 with a ``notification_rate_limited`` error and ``Retry-After``.
    """
    return NotificationAdmissionResponse(user_id=user_id, admitted=True)
