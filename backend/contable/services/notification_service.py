"""
Servicio de notificaciones.
Las notificaciones son un efecto secundario: un fallo al crearlas se
registra en el log y nunca interrumpe la operación principal.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.models import Notification, NotificationType

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    user_id: int,
    title: str,
    message: str,
    type: NotificationType = NotificationType.INFO,
    related_id: Optional[int] = None,
    related_type: Optional[str] = None
) -> Optional[Notification]:
    """
    Crea una notificación. Devuelve None si no pudo guardarse.
    Debe llamarse después de confirmar la operación principal.
    """
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        related_id=related_id,
        related_type=related_type,
        read=False
    )
    try:
        db.add(notification)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Error al crear notificación para usuario {user_id}: {e}")
        return None

    return notification


def get_notifications(db: Session, user_id: int) -> List[Notification]:
    """Notificaciones del usuario, más recientes primero."""
    return db.query(Notification).filter(
        Notification.user_id == user_id
    ).order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def get_unread_count(db: Session, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read == False
    ).count()


def mark_as_read(db: Session, user_id: int, notification_id: int) -> bool:
    updated = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).update({Notification.read: True}, synchronize_session=False)
    db.commit()
    return updated > 0


def mark_all_as_read(db: Session, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read == False
    ).update({Notification.read: True}, synchronize_session=False)
    db.commit()
    return updated


def delete_notification(db: Session, user_id: int, notification_id: int) -> bool:
    deleted = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def delete_all_notifications(db: Session, user_id: int) -> int:
    deleted = db.query(Notification).filter(
        Notification.user_id == user_id
    ).delete(synchronize_session=False)
    db.commit()
    return deleted
