"""
Aplicación principal FastAPI del Sistema Contable DGII.
Facturación, gastos y Reporte 606 para contribuyentes de República Dominicana.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .core.config import settings, get_dominican_time
from .db.database import init_db, engine
from .api.endpoints import (
    auth, clients, suppliers, expenses, invoices, reports,
    notifications, dashboard, bootstrap
)
from .api.endpoints import settings as invoice_settings
from .api.middleware.security import (
    SecurityHeadersMiddleware,
    RateLimitMiddleware,
    RequestLogMiddleware
)
from .services.storage_service import verify_buckets

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Crear aplicación
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## Sistema Contable DGII

    Contabilidad para contribuyentes de República Dominicana.

    ### Funcionalidades:
    - Registro de gastos con datos fiscales (NCF, tipo de comprobante, forma de pago)
    - Facturación con cálculo de ITBIS
    - Reporte 606 de compras de bienes y servicios
    - Notificaciones de facturas y gastos
    - Plantilla de factura personalizable y PDF
    """,
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)

# Incluir routers
for module in (auth, clients, suppliers, expenses, invoices, reports,
               notifications, dashboard, invoice_settings):
    app.include_router(module.router, prefix="/api/v1")

app.include_router(bootstrap.router)

# Archivos subidos (logos, comprobantes)
app.mount(
    settings.STORAGE_PUBLIC_URL,
    StaticFiles(directory=settings.STORAGE_PATH, check_dir=False),
    name="storage"
)


@app.on_event("startup")
async def startup_event():
    """Inicialización al arrancar la aplicación."""
    storage = verify_buckets()
    if not storage['success']:
        logger.warning(storage['error'])

    init_db()

    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} iniciado")
    logger.info("Documentación disponible en /api/docs")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Aplicación cerrada")


@app.get("/")
async def root():
    """Endpoint raíz."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/api/docs"
    }


@app.get("/health")
async def health_check():
    """Health check para monitoreo, incluye la conexión a base de datos."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Error de conexión a base de datos: {e}")
        database = "error"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "version": settings.APP_VERSION,
        "time": get_dominican_time().isoformat()
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("contable.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
