"""
Endpoints de clientes.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...db.database import get_db
from ...models.models import User, Client, Invoice, NotificationType
from ...schemas.schemas import ClientCreate, ClientResponse
from ...services.notification_service import create_notification
from .auth import get_current_active_user

router = APIRouter(prefix="/clients", tags=["Clientes"])


def _get_client_or_404(db: Session, user: User, client_id: int) -> Client:
    client = db.query(Client).filter(
        Client.id == client_id,
        Client.user_id == user.id
    ).first()

    if not client:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cliente no encontrado"
        )
    return client


@router.get("/", response_model=List[ClientResponse])
async def list_clients(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Clientes del usuario ordenados por nombre."""
    return db.query(Client).filter(
        Client.user_id == current_user.id
    ).order_by(Client.name).all()


@router.post("/", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    client = Client(user_id=current_user.id, **data.dict())

    db.add(client)
    db.commit()
    db.refresh(client)

    create_notification(
        db, current_user.id,
        title="Nuevo cliente",
        message=f"Se ha creado el cliente {client.name} exitosamente.",
        type=NotificationType.SUCCESS,
        related_id=client.id,
        related_type="client"
    )
    return client


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return _get_client_or_404(db, current_user, client_id)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    client = _get_client_or_404(db, current_user, client_id)

    for field, value in data.dict().items():
        setattr(client, field, value)

    db.commit()
    db.refresh(client)

    create_notification(
        db, current_user.id,
        title="Cliente actualizado",
        message=f"Se ha actualizado la información del cliente {client.name}.",
        type=NotificationType.INFO,
        related_id=client.id,
        related_type="client"
    )
    return client


@router.delete("/{client_id}")
async def delete_client(
    client_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Elimina un cliente. No se permite si tiene facturas registradas.
    """
    client = _get_client_or_404(db, current_user, client_id)

    has_invoices = db.query(Invoice).filter(Invoice.client_id == client.id).first()
    if has_invoices:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No se puede eliminar un cliente con facturas registradas"
        )

    name = client.name
    db.delete(client)
    db.commit()

    create_notification(
        db, current_user.id,
        title="Cliente eliminado",
        message=f"Se ha eliminado el cliente {name}.",
        type=NotificationType.WARNING,
        related_type="client"
    )
    return {"message": "Cliente eliminado correctamente"}
