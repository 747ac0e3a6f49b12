from typing import Any

from fastapi import APIRouter, Depends

from license_manager.infrastructure.scheduling import NotificationScheduler
from license_manager.interfaces.api.dependencies import get_scheduler

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(
    scheduler: NotificationScheduler | None = Depends(get_scheduler),
) -> dict[str, Any]:
    return {
        "status": "ok",
        "scheduler": scheduler is not None,
        "scheduled_users": len(scheduler.registry) if scheduler is not None else 0,
    }
