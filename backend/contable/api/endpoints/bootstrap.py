"""
Rutas de arranque: usuario de prueba y vista previa de la plantilla.
Se montan fuera de /api/v1 y no requieren autenticación.
"""
import json
import logging
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...db.database import get_admin_db
from ...core.security import get_password_hash
from ...models.models import User
from ...schemas.schemas import SeedResponse
from ...services.invoice_preview import generate_invoice_preview

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Arranque"])

TEST_USER = {
    "name": "Usuario de Prueba",
    "email": "test@example.com",
    "password": "password123",
    "company": "Empresa de Prueba S.R.L.",
    "rnc": "123456789",
    "address": "Calle Principal #123, Santo Domingo",
    "phone": "+1809555-1234",
}


@router.get("/seed-test-user", response_model=SeedResponse, response_model_exclude_none=True)
async def seed_test_user(db: Session = Depends(get_admin_db)):
    """
    Crea el usuario de prueba solo si no existe ningún usuario.
    Usa el acceso privilegiado a la base de datos.
    """
    try:
        count = db.query(User).count()

        if count > 0:
            return {
                "success": True,
                "message": "Ya existen usuarios en el sistema",
                "created": False
            }

        data = dict(TEST_USER)
        user = User(
            hashed_password=get_password_hash(data.pop("password")),
            **data
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"Usuario de prueba creado: {user.email}")
        return {
            "success": True,
            "message": "Usuario de prueba creado exitosamente",
            "created": True,
            "user": {
                "id": user.id,
                "email": user.email,
                "name": user.name
            }
        }
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error en seed-test-user: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": f"Error al crear usuario de prueba: {e}"
            }
        )
    except Exception as e:
        db.rollback()
        logger.exception(f"Error inesperado en seed-test-user: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": f"Error al crear usuario de prueba: {e}"
            }
        )


@router.get("/invoice-preview")
async def invoice_preview(settings: Optional[str] = None):
    """
    Vista previa HTML de la factura con la configuración recibida
    como JSON en el parámetro `settings`.
    """
    if not settings:
        return JSONResponse(
            status_code=400,
            content={"error": "Se requiere el parámetro settings"}
        )

    try:
        parsed_settings = json.loads(settings)
        if not isinstance(parsed_settings, dict):
            raise ValueError("settings debe ser un objeto JSON")
    except ValueError as e:
        logger.error(f"Error al generar vista previa: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Error al generar vista previa"}
        )

    return HTMLResponse(content=generate_invoice_preview(parsed_settings))
