#!/usr/bin/env python3
"""
Script para crear datos de demostración en la base de datos.
Ejecutar: python backend/scripts/seed_data.py [--expenses N]
"""

import argparse
import random
import sys
from datetime import date, timedelta
from pathlib import Path

# Agregar el directorio backend al path de Python
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from contable.db.database import AdminSessionLocal, init_db
from contable.models.models import User, Supplier, Client, Expense
from contable.core.security import get_password_hash
from contable.schemas.schemas import InvoiceCreate, InvoiceItemBase
from contable.services.invoice_service import create_invoice


DEMO_USER = {
    "name": "Usuario Demo",
    "email": "demo@contable.do",
    "password": "Demo2024!",
    "company": "Comercial Demo S.R.L.",
    "rnc": "131000517",
    "address": "Av. Winston Churchill #100, Santo Domingo",
    "phone": "8095551234",
}

SUPPLIERS = [
    {"name": "Papelería Nacional", "rnc": "101012345"},
    {"name": "Consultores Asociados", "rnc": "131012345"},
    {"name": "TechStore", "rnc": "501012345"},
    {"name": "Servicios Generales", "rnc": "401789012"},
    {"name": "Distribuidora Central", "rnc": "130987654"},
    {"name": "Importadora del Este", "rnc": "101567890"},
]

CATEGORIES = ["Bienes", "Servicios", "Alquileres", "Impuestos", "Otros", "Importaciones"]
PAYMENT_METHODS = ["Efectivo", "Cheques/Transferencias/Depósito", "Tarjeta Crédito/Débito", "Compra a Crédito"]
DOCUMENT_TYPES = ["Factura", "Nota de Débito", "Nota de Crédito", "Comprobante de Compras"]


def generate_mock_expenses(count: int, start: date, end: date, rng: random.Random) -> list:
    """Gastos aleatorios entre dos fechas con datos fiscales completos."""
    span = (end - start).days
    expenses = []

    for i in range(count):
        category = rng.choice(CATEGORIES)
        expenses.append({
            "date": start + timedelta(days=rng.randint(0, span)),
            "description": f"Compra de {category.lower()}",
            "amount": round(rng.random() * 1000, 2),
            "category": category,
            "ncf": f"B0100000{i + 1:03d}",
            "document_type": rng.choice(DOCUMENT_TYPES),
            "payment_method": rng.choice(PAYMENT_METHODS),
            "itbis_included": True,
            "notes": f"Nota de prueba para {category.lower()}",
        })

    return expenses


def seed_user(db: Session):
    """Crea el usuario demo si no existe. Devuelve (usuario, creado)."""
    user = db.query(User).filter(User.email == DEMO_USER["email"]).first()
    if user:
        return user, False

    data = dict(DEMO_USER)
    user = User(hashed_password=get_password_hash(data.pop("password")), **data)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, True


def seed_business_data(db: Session, user: User, expense_count: int):
    """Proveedores, un cliente, gastos del último mes y una factura."""
    rng = random.Random(606)

    suppliers = [Supplier(user_id=user.id, **s) for s in SUPPLIERS]
    db.add_all(suppliers)

    client = Client(
        user_id=user.id,
        name="Cliente Ejemplo S.A.",
        rnc="101000016",
        address="Calle Cliente #123, Santiago",
        email="compras@clienteejemplo.do",
        phone="8095550000"
    )
    db.add(client)
    db.commit()

    today = date.today()
    for data in generate_mock_expenses(expense_count, today - timedelta(days=30), today, rng):
        db.add(Expense(user_id=user.id, supplier_id=rng.choice(suppliers).id, **data))
    db.commit()

    invoice = create_invoice(db, user.id, InvoiceCreate(
        client_id=client.id,
        ncf="B0100000001",
        date=today,
        items=[
            InvoiceItemBase(description="Servicio de consultoría", quantity=1, price=1000),
            InvoiceItemBase(description="Material de oficina", quantity=2, price=500),
        ]
    ))
    return len(suppliers), invoice


def main():
    """Función principal."""
    parser = argparse.ArgumentParser(description="Datos de demostración")
    parser.add_argument("--expenses", type=int, default=10, help="Cantidad de gastos a generar")
    args = parser.parse_args()

    print("=" * 60)
    print("🌱 SEED DATA - Sistema Contable DGII")
    print("=" * 60)

    print("\n📋 Verificando tablas de base de datos...")
    init_db()
    print("✅ Tablas verificadas\n")

    db = AdminSessionLocal()

    try:
        user, created = seed_user(db)
        if not created:
            print(f"ℹ️  El usuario {user.email} ya existe, no se generan datos nuevos")
            return 0

        print(f"✅ Usuario creado: {user.email}")
        supplier_count, invoice = seed_business_data(db, user, args.expenses)

        print(f"✅ Proveedores creados: {supplier_count}")
        print(f"✅ Gastos creados: {args.expenses}")
        print(f"✅ Factura creada: {invoice.invoice_number} por RD${invoice.total:,.2f}")

        print("\n📖 Credenciales de acceso:")
        print(f"   - Email: {DEMO_USER['email']}")
        print(f"   - Contraseña: {DEMO_USER['password']}")
        print("\n" + "=" * 60)

    except SQLAlchemyError as e:
        print(f"\n❌ Error al crear datos de prueba: {e}")
        db.rollback()
        return 1
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
