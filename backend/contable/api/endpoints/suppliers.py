"""
Endpoints de proveedores.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...db.database import get_db
from ...models.models import User, Supplier, Expense
from ...schemas.schemas import SupplierCreate, SupplierResponse
from .auth import get_current_active_user

router = APIRouter(prefix="/suppliers", tags=["Proveedores"])


def _get_supplier_or_404(db: Session, user: User, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(
        Supplier.id == supplier_id,
        Supplier.user_id == user.id
    ).first()

    if not supplier:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Proveedor no encontrado"
        )
    return supplier


@router.get("/", response_model=List[SupplierResponse])
async def list_suppliers(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return db.query(Supplier).filter(
        Supplier.user_id == current_user.id
    ).order_by(Supplier.name).all()


@router.post("/", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    data: SupplierCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    supplier = Supplier(user_id=current_user.id, **data.dict())

    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


@router.get("/{supplier_id}", response_model=SupplierResponse)
async def get_supplier(
    supplier_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return _get_supplier_or_404(db, current_user, supplier_id)


@router.put("/{supplier_id}", response_model=SupplierResponse)
async def update_supplier(
    supplier_id: int,
    data: SupplierCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    supplier = _get_supplier_or_404(db, current_user, supplier_id)

    for field, value in data.dict().items():
        setattr(supplier, field, value)

    db.commit()
    db.refresh(supplier)
    return supplier


@router.delete("/{supplier_id}")
async def delete_supplier(
    supplier_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Elimina un proveedor. Los gastos asociados quedan sin proveedor
    y aparecen con '-' en el Reporte 606.
    """
    supplier = _get_supplier_or_404(db, current_user, supplier_id)

    db.query(Expense).filter(
        Expense.supplier_id == supplier.id
    ).update({Expense.supplier_id: None}, synchronize_session=False)

    db.delete(supplier)
    db.commit()
    return {"message": "Proveedor eliminado correctamente"}
