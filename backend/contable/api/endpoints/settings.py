"""
Endpoints de personalización de la plantilla de factura.
"""
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session

from ...db.database import get_db
from ...models.models import User, InvoiceSettings
from ...schemas.schemas import InvoiceSettingsUpdate, InvoiceSettingsResponse
from ...services.storage_service import (
    StorageBuckets, StorageError, upload_file, delete_file, get_file_url
)
from .auth import get_current_active_user

router = APIRouter(prefix="/settings", tags=["Configuración"])


def get_or_create_settings(db: Session, user: User) -> InvoiceSettings:
    """
    Configuración de factura del usuario. Si no existe se crea con los
    datos de la empresa del perfil.
    """
    invoice_settings = db.query(InvoiceSettings).filter(
        InvoiceSettings.user_id == user.id
    ).first()

    if not invoice_settings:
        invoice_settings = InvoiceSettings(
            user_id=user.id,
            company_name=user.company or user.name,
            company_rnc=user.rnc,
            company_address=user.address,
            company_phone=user.phone,
            company_email=user.email
        )
        db.add(invoice_settings)
        db.commit()
        db.refresh(invoice_settings)

    return invoice_settings


def get_invoice_template(db: Session, user: User) -> dict:
    """Configuración como diccionario para el generador de PDF."""
    invoice_settings = get_or_create_settings(db, user)
    return InvoiceSettingsResponse.from_orm(invoice_settings).dict()


@router.get("/invoice", response_model=InvoiceSettingsResponse)
async def get_invoice_settings(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return get_or_create_settings(db, current_user)


@router.put("/invoice", response_model=InvoiceSettingsResponse)
async def update_invoice_settings(
    data: InvoiceSettingsUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    invoice_settings = get_or_create_settings(db, current_user)

    for field, value in data.dict(exclude_unset=True).items():
        setattr(invoice_settings, field, value)

    db.commit()
    db.refresh(invoice_settings)
    return invoice_settings


async def _store_image(
    file: UploadFile,
    current_user: User,
    db: Session,
    field: str
) -> dict:
    invoice_settings = get_or_create_settings(db, current_user)
    content = await file.read()

    try:
        result = upload_file(
            content,
            StorageBuckets.LOGOS,
            current_user.id,
            filename=file.filename,
            content_type=file.content_type
        )
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    previous = getattr(invoice_settings, field)
    setattr(invoice_settings, field, result.path)
    db.commit()

    if previous and previous != result.path:
        delete_file(StorageBuckets.LOGOS, previous)

    return {"path": result.path, "url": result.url}


@router.post("/invoice/logo")
async def upload_logo(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Sube el logo de la empresa (JPEG, PNG o WebP, máximo 2MB).
    """
    return await _store_image(file, current_user, db, 'company_logo')


@router.post("/invoice/signature")
async def upload_signature(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Sube la imagen de firma que aparece en las facturas."""
    return await _store_image(file, current_user, db, 'signature_image')


@router.get("/invoice/logo")
async def get_logo_url(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    invoice_settings = get_or_create_settings(db, current_user)
    return {
        "path": invoice_settings.company_logo,
        "url": get_file_url(StorageBuckets.LOGOS, invoice_settings.company_logo)
    }
