"""
Endpoints del centro de notificaciones.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...db.database import get_db
from ...models.models import User
from ...schemas.schemas import NotificationResponse
from ...services import notification_service
from .auth import get_current_active_user

router = APIRouter(prefix="/notifications", tags=["Notificaciones"])


@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return notification_service.get_notifications(db, current_user.id)


@router.get("/unread-count")
async def unread_count(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return {"count": notification_service.get_unread_count(db, current_user.id)}


@router.post("/read-all")
async def mark_all_as_read(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    updated = notification_service.mark_all_as_read(db, current_user.id)
    return {"updated": updated}


@router.post("/{notification_id}/read")
async def mark_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    if not notification_service.mark_as_read(db, current_user.id, notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notificación no encontrada"
        )
    return {"message": "Notificación marcada como leída"}


@router.delete("/")
async def delete_all_notifications(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    deleted = notification_service.delete_all_notifications(db, current_user.id)
    return {"deleted": deleted}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    if not notification_service.delete_notification(db, current_user.id, notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notificación no encontrada"
        )
    return {"message": "Notificación eliminada"}
