"""
Endpoints de gastos.
Los gastos son la fuente de las líneas del Reporte 606.
"""
import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session, joinedload

from ...db.database import get_db
from ...models.models import User, Expense, ExpenseStatus, Supplier, NotificationType
from ...schemas.schemas import ExpenseCreate, ExpenseUpdate, ExpenseResponse
from ...services.notification_service import create_notification
from ...services.storage_service import (
    StorageBuckets, StorageError, upload_file, delete_file, get_file_url
)
from ...utils.formatters import format_currency
from .auth import get_current_active_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["Gastos"])

REQUIRED_FIELDS = ('date', 'description', 'amount', 'category', 'status')


def _get_expense_or_404(db: Session, user: User, expense_id: int) -> Expense:
    expense = db.query(Expense).options(
        joinedload(Expense.supplier)
    ).filter(
        Expense.id == expense_id,
        Expense.user_id == user.id
    ).first()

    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Gasto no encontrado"
        )
    return expense


def _check_supplier(db: Session, user: User, supplier_id: Optional[int]) -> None:
    if supplier_id is None:
        return
    supplier = db.query(Supplier).filter(
        Supplier.id == supplier_id,
        Supplier.user_id == user.id
    ).first()
    if not supplier:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Proveedor no encontrado"
        )


@router.get("/", response_model=List[ExpenseResponse])
async def list_expenses(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[str] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Gastos del usuario, más recientes primero.
    Filtros opcionales por rango de fechas y categoría.
    """
    query = db.query(Expense).options(
        joinedload(Expense.supplier)
    ).filter(Expense.user_id == current_user.id)

    if start_date:
        query = query.filter(Expense.date >= start_date)
    if end_date:
        query = query.filter(Expense.date <= end_date)
    if category:
        query = query.filter(Expense.category == category)

    return query.order_by(Expense.date.desc(), Expense.id.desc()).all()


@router.post("/", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    data: ExpenseCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    _check_supplier(db, current_user, data.supplier_id)

    values = data.dict()
    values['status'] = ExpenseStatus(data.status.value)
    expense = Expense(user_id=current_user.id, **values)

    db.add(expense)
    db.commit()
    db.refresh(expense)

    logger.info(f"Gasto {expense.id} registrado para usuario {current_user.id}")

    create_notification(
        db, current_user.id,
        title="Nuevo gasto",
        message=(
            f"Se ha registrado un gasto de {format_currency(expense.amount)} "
            f"en la categoría {expense.category}."
        ),
        type=NotificationType.INFO,
        related_id=expense.id,
        related_type="expense"
    )
    return expense


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return _get_expense_or_404(db, current_user, expense_id)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    data: ExpenseUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    expense = _get_expense_or_404(db, current_user, expense_id)
    update_data = data.dict(exclude_unset=True)

    if 'supplier_id' in update_data:
        _check_supplier(db, current_user, update_data['supplier_id'])

    if update_data.get('status') is not None:
        update_data['status'] = ExpenseStatus(update_data['status'].value)

    for field, value in update_data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(expense, field, value)

    db.commit()
    db.refresh(expense)

    create_notification(
        db, current_user.id,
        title="Gasto actualizado",
        message=(
            f"Se ha actualizado el gasto de {format_currency(expense.amount)} "
            f"en la categoría {expense.category}."
        ),
        type=NotificationType.INFO,
        related_id=expense.id,
        related_type="expense"
    )
    return expense


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    expense = _get_expense_or_404(db, current_user, expense_id)
    amount = expense.amount
    category = expense.category
    receipt = expense.receipt

    db.delete(expense)
    db.commit()

    if receipt:
        delete_file(StorageBuckets.RECEIPTS, receipt)

    create_notification(
        db, current_user.id,
        title="Gasto eliminado",
        message=(
            f"Se ha eliminado un gasto de {format_currency(amount)} "
            f"en la categoría {category}."
        ),
        type=NotificationType.WARNING,
        related_type="expense"
    )
    return {"message": "Gasto eliminado correctamente"}


@router.post("/{expense_id}/receipt")
async def upload_receipt(
    expense_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Adjunta el comprobante del gasto (imagen o PDF, máximo 5MB).
    Reemplaza el comprobante anterior si existía.
    """
    expense = _get_expense_or_404(db, current_user, expense_id)
    content = await file.read()

    try:
        result = upload_file(
            content,
            StorageBuckets.RECEIPTS,
            current_user.id,
            filename=file.filename,
            content_type=file.content_type
        )
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    previous = expense.receipt
    expense.receipt = result.path
    db.commit()

    if previous and previous != result.path:
        delete_file(StorageBuckets.RECEIPTS, previous)

    return {"path": result.path, "url": result.url}


@router.get("/{expense_id}/receipt")
async def get_receipt_url(
    expense_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    expense = _get_expense_or_404(db, current_user, expense_id)
    if not expense.receipt:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="El gasto no tiene comprobante"
        )
    return {"path": expense.receipt, "url": get_file_url(StorageBuckets.RECEIPTS, expense.receipt)}
