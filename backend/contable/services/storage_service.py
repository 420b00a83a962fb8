"""
Almacenamiento de archivos en disco local, organizado por buckets.

Cada bucket es un directorio bajo STORAGE_PATH y los archivos de cada
usuario viven en <bucket>/<user_id>/. Las URLs públicas se sirven desde
STORAGE_PUBLIC_URL.
"""
import logging
import os
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.config import settings, get_bucket_path
from ..utils.validators import sanitize_filename

logger = logging.getLogger(__name__)


class StorageBuckets:
    LOGOS = "logos"
    RECEIPTS = "receipts"
    INVOICES = "invoices"
    PROFILES = "profiles"

    ALL = (LOGOS, RECEIPTS, INVOICES, PROFILES)


IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
PDF_TYPES = ("application/pdf",)
ALL_FILE_TYPES = IMAGE_TYPES + PDF_TYPES

FILE_SIZE_LIMITS = {
    'logo': 2 * 1024 * 1024,  # 2MB
    'receipt': 5 * 1024 * 1024,  # 5MB
    'attachment': 10 * 1024 * 1024,  # 10MB
}

# Tipos y tamaño máximo aceptados por bucket
BUCKET_RULES = {
    StorageBuckets.LOGOS: (IMAGE_TYPES, FILE_SIZE_LIMITS['logo']),
    StorageBuckets.RECEIPTS: (ALL_FILE_TYPES, FILE_SIZE_LIMITS['receipt']),
    StorageBuckets.INVOICES: (PDF_TYPES, FILE_SIZE_LIMITS['attachment']),
    StorageBuckets.PROFILES: (IMAGE_TYPES, FILE_SIZE_LIMITS['logo']),
}


class StorageError(ValueError):
    """Archivo rechazado o ruta inválida."""
    pass


@dataclass
class UploadResult:
    path: str
    url: str


def _resolve(bucket: str, path: str) -> str:
    """Ruta absoluta de un archivo, sin salir del bucket."""
    if bucket not in StorageBuckets.ALL:
        raise StorageError(f"Bucket desconocido: {bucket}")

    root = os.path.realpath(get_bucket_path(bucket))
    full_path = os.path.realpath(os.path.join(root, path))
    if os.path.commonpath([root, full_path]) != root:
        raise StorageError("Ruta de archivo inválida")
    return full_path


def validate_upload(bucket: str, content_type: Optional[str], size: int) -> None:
    allowed_types, max_size = BUCKET_RULES[bucket]

    if content_type not in allowed_types:
        raise StorageError(
            f"Tipo de archivo no permitido. Tipos aceptados: {', '.join(allowed_types)}"
        )
    if size > max_size:
        raise StorageError(
            f"El archivo excede el tamaño máximo de {max_size // (1024 * 1024)}MB"
        )


def upload_file(
    content: bytes,
    bucket: str,
    user_id: int,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    custom_path: Optional[str] = None
) -> UploadResult:
    """
    Guarda un archivo en el bucket del usuario.
    Nombre por defecto: <user_id>/<timestamp>_<uuid>.<ext>
    """
    if bucket not in StorageBuckets.ALL:
        raise StorageError(f"Bucket desconocido: {bucket}")
    validate_upload(bucket, content_type, len(content))

    if custom_path:
        relative_path = custom_path
    else:
        safe_name = sanitize_filename(filename or "")
        extension = safe_name.rsplit('.', 1)[-1].lower() if '.' in safe_name else 'bin'
        relative_path = f"{user_id}/{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{extension}"

    full_path = _resolve(bucket, relative_path)
    os.makedirs(os.path.dirname(full_path), exist_ok=True)

    with open(full_path, "wb") as f:
        f.write(content)

    logger.info(f"Archivo guardado en {bucket}/{relative_path} ({len(content)} bytes)")
    return UploadResult(path=relative_path, url=get_file_url(bucket, relative_path))


def get_file_url(bucket: str, path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return f"{settings.STORAGE_PUBLIC_URL.rstrip('/')}/{bucket}/{path}"


def delete_file(bucket: str, path: Optional[str]) -> bool:
    """Elimina un archivo. Devuelve False si no existía."""
    if not path:
        return False

    full_path = _resolve(bucket, path)
    if not os.path.isfile(full_path):
        return False

    try:
        os.remove(full_path)
    except OSError as e:
        logger.error(f"Error al eliminar archivo {bucket}/{path}: {e}")
        return False
    return True


def list_user_files(bucket: str, user_id: int) -> List[str]:
    user_path = get_bucket_path(bucket, user_id)
    if not os.path.isdir(user_path):
        return []
    return sorted(
        name for name in os.listdir(user_path)
        if os.path.isfile(os.path.join(user_path, name))
    )


def verify_buckets(create: bool = True) -> Dict:
    """
    Verifica qué buckets están disponibles, creándolos si es necesario.
    """
    available = []

    for bucket in StorageBuckets.ALL:
        path = get_bucket_path(bucket)
        try:
            if create:
                os.makedirs(path, exist_ok=True)
            if os.path.isdir(path) and os.access(path, os.W_OK):
                available.append(bucket)
            else:
                logger.warning(f"Bucket {bucket} no está disponible")
        except OSError as e:
            logger.warning(f"Error al verificar bucket {bucket}: {e}")

    if not available:
        return {
            'success': False,
            'error': "No se encontraron buckets de almacenamiento disponibles. Algunas funciones estarán limitadas.",
            'buckets': []
        }
    return {'success': True, 'buckets': available}
