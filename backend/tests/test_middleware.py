"""
Tests del límite de peticiones por IP.
"""
from fastapi import FastAPI
from fastapi.testclient import TestClient

from contable.api.middleware.security import RateLimitMiddleware


def build_app(requests_limit: int, period: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, requests_limit=requests_limit, period=period)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    return app


class TestRateLimit:

    def test_blocks_after_limit(self):
        client = TestClient(build_app(requests_limit=2, period=60))

        assert client.get("/ping").status_code == 200
        assert client.get("/ping").status_code == 200

        response = client.get("/ping")
        assert response.status_code == 429
        assert response.json()["detail"] == "Demasiadas solicitudes. Intente más tarde."

    def test_purge_removes_idle_ips(self):
        """Las IPs sin peticiones dentro de la ventana se eliminan del registro"""
        middleware = RateLimitMiddleware(app=None, requests_limit=5, period=60)
        middleware.request_counts["10.0.0.1"] = [100.0, 110.0]
        middleware.request_counts["10.0.0.2"] = [100.0, 150.0]

        # 165 - 100 = 65 fuera de la ventana, 165 - 150 = 15 dentro
        middleware.purge_expired(165.0)

        assert "10.0.0.1" not in middleware.request_counts
        assert middleware.request_counts["10.0.0.2"] == [150.0]

    def test_purge_keeps_registry_bounded(self):
        middleware = RateLimitMiddleware(app=None, requests_limit=5, period=60)
        for i in range(1000):
            middleware.request_counts[f"192.168.{i // 256}.{i % 256}"] = [float(i)]

        middleware.purge_expired(2000.0)

        assert len(middleware.request_counts) == 0
