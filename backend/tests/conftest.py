"""
Fixtures compartidas: base de datos SQLite en memoria, cliente HTTP
y usuario autenticado.
"""
import os
import tempfile

# Configuración de pruebas antes de importar la aplicación
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("ADMIN_DATABASE_URL", None)
os.environ["STORAGE_PATH"] = tempfile.mkdtemp(prefix="contable-storage-")
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "8192"
os.environ["SECRET_KEY"] = "clave-de-pruebas"

import pytest
from fastapi.testclient import TestClient

from contable.core.security import create_access_token, get_password_hash
from contable.db.database import Base, engine, SessionLocal
from contable.main import app
from contable.models.models import User, Supplier, Client


@pytest.fixture
def db():
    """Sesión sobre una base de datos vacía."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def user(db):
    user = User(
        name="Empresa Prueba",
        email="empresa@prueba.do",
        hashed_password=get_password_hash("Clave1234"),
        company="Empresa Prueba S.R.L.",
        rnc="131000517",
        address="Calle Principal #1, Santo Domingo",
        phone="8095550000"
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def supplier(db, user):
    supplier = Supplier(user_id=user.id, name="Papelería Nacional", rnc="101012345")
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


@pytest.fixture
def customer(db, user):
    customer = Client(user_id=user.id, name="Cliente Ejemplo S.A.", rnc="101000016")
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer
