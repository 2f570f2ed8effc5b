"""
Prometheus Metrics HTTP Server.

- /metrics: Prometheus exposition of the default registry
- /health:  JSON status from the registered health check, 503 unless "ok"
"""

import logging
from typing import Any, Callable, Dict, Optional

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

logger = logging.getLogger(__name__)

HealthCheck = Callable[[], Dict[str, Any]]


def _always_ok() -> Dict[str, Any]:
    return {"status": "ok"}


class MetricsServer:
    """
    HTTP server for Prometheus metrics and liveness probes.

    Example:
        server = MetricsServer(port=8000, health_check=lambda: {"status": "ok"})
        await server.start()

        # Metrics available at http://localhost:8000/metrics

        await server.stop()
    """

    def __init__(self, port: int = 8000, host: str = "0.0.0.0", health_check: Optional[HealthCheck] = None):
        self.port = port
        self.host = host
        self.health_check = health_check or _always_ok
        self._runner: Optional[web.AppRunner] = None

    async def _metrics(self, request: web.Request) -> web.Response:
        return web.Response(body=generate_latest(REGISTRY), headers={"Content-Type": CONTENT_TYPE_LATEST})

    async def _health(self, request: web.Request) -> web.Response:
        try:
            report = self.health_check()
        except Exception as e:
            logger.error(f"❌ Health check failed: {e}", exc_info=True)
            report = {"status": "error", "error": str(e)}
        return web.json_response(report, status=200 if report.get("status") == "ok" else 503)

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/metrics", self._metrics)
        app.router.add_get("/health", self._health)
        return app

    async def start(self):
        """Bind and serve. Raises if the port cannot be bound."""
        runner = web.AppRunner(self.build_app())
        await runner.setup()
        try:
            await web.TCPSite(runner, self.host, self.port).start()
        except Exception as e:
            logger.error(f"❌ Failed to start metrics server on port {self.port}: {e}")
            await runner.cleanup()
            raise

        self._runner = runner
        logger.info(f"📊 Metrics server started on http://{self.host}:{self.port}/metrics")

    async def stop(self):
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("🛑 Metrics server stopped")


# Process-wide instance managed by main
_metrics_server: Optional[MetricsServer] = None


async def start_metrics_server(port: int = 8000, host: str = "0.0.0.0", health_check: Optional[HealthCheck] = None):
    """Start the global metrics server (no-op with a warning if already running)."""
    global _metrics_server

    if _metrics_server is not None:
        logger.warning("⚠️ Metrics server already running")
        return

    server = MetricsServer(port=port, host=host, health_check=health_check)
    await server.start()
    _metrics_server = server


async def stop_metrics_server():
    """Stop the global metrics server."""
    global _metrics_server

    if _metrics_server is not None:
        await _metrics_server.stop()
        _metrics_server = None
