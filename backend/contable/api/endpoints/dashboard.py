"""
Endpoint del panel principal.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...db.database import get_db
from ...models.models import User
from ...schemas.schemas import DashboardStats
from ...services.dashboard_service import get_dashboard_stats
from .auth import get_current_active_user

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Resumen de facturación y gastos del usuario."""
    return get_dashboard_stats(db, current_user.id)
