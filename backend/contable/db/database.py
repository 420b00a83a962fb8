"""
Configuración de base de datos.
Dos accesos: el público usado por la aplicación y el privilegiado
usado por las rutas de arranque (equivalente a la clave de servicio).
"""
from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from ..core.config import settings


def _build_engine(url: str):
    """Crea el motor; las opciones de pool solo aplican a servidores."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DEBUG
        )
    return create_engine(
        url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=settings.DEBUG
    )


engine = _build_engine(settings.DATABASE_URL)

if settings.ADMIN_DATABASE_URL and settings.ADMIN_DATABASE_URL != settings.DATABASE_URL:
    admin_engine = _build_engine(settings.ADMIN_DATABASE_URL)
else:
    admin_engine = engine

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

AdminSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=admin_engine
)

Base = declarative_base()


def get_db():
    """
    Dependency para obtener sesión de base de datos.
    Garantiza cierre correcto de conexión.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_admin_db():
    """Sesión con acceso privilegiado."""
    db = AdminSessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Inicializa las tablas de la base de datos."""
    Base.metadata.create_all(bind=admin_engine)
