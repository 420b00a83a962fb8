"""
Middleware de seguridad y registro de peticiones.
"""
import logging
import time
from collections import defaultdict
from typing import Callable, Dict

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ...core.config import settings

logger = logging.getLogger("contable.requests")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Agrega headers de seguridad a todas las respuestas.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; img-src 'self' data: https:; "
            "style-src 'self' 'unsafe-inline'"
        )
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Límite de peticiones por IP en una ventana deslizante.
    Configurable con RATE_LIMIT_REQUESTS y RATE_LIMIT_PERIOD.
    """

    def __init__(self, app, requests_limit: int = None, period: int = None):
        super().__init__(app)
        self.requests_limit = requests_limit or settings.RATE_LIMIT_REQUESTS
        self.period = period or settings.RATE_LIMIT_PERIOD
        self.request_counts: Dict[str, list] = defaultdict(list)

    def purge_expired(self, current_time: float) -> None:
        """Descarta marcas fuera de la ventana y las IPs que quedan sin ninguna."""
        for client_ip in list(self.request_counts):
            recent = [
                t for t in self.request_counts[client_ip]
                if current_time - t < self.period
            ]
            if recent:
                self.request_counts[client_ip] = recent
            else:
                del self.request_counts[client_ip]

    async def dispatch(self, request: Request, call_next: Callable):
        client_ip = request.client.host if request.client else "unknown"
        current_time = time.time()

        self.purge_expired(current_time)

        if len(self.request_counts[client_ip]) >= self.requests_limit:
            logger.warning(f"Límite de peticiones excedido para {client_ip}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Demasiadas solicitudes. Intente más tarde."}
            )

        self.request_counts[client_ip].append(current_time)

        return await call_next(request)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """
    Registra método, ruta, estado y duración de cada petición.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} "
            f"- {process_time:.3f}s - IP: {request.client.host if request.client else 'unknown'}"
        )

        return response
