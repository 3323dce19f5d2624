"""FastAPI application for the refund service.

This package provides REST endpoints for:
- Health checks
- Cancellation refunds and policy lookup

Deployed as an AWS Lambda behind API Gateway through Mangum; run locally
with ``run_server()``.
"""

import logging

from fastapi import FastAPI
from mangum import Mangum

from refunds import __version__
from refunds.utils.logging import StructuredFormatter
from refunds_api.exceptions import register_exception_handlers
from refunds_api.middleware.correlation import CorrelationIdMiddleware
from refunds_api.routes.health import router as health_router
from refunds_api.routes.refunds import router as refunds_router


def configure_logging(level: int = logging.INFO) -> None:
    """Attach the correlation-aware formatter to the root logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter("%(levelname)s %(name)s %(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


configure_logging()

app = FastAPI(
    title="Midas Refund API",
    description="Cancellation refunds for luxury car, yacht, jet and property rentals",
    version=__version__,
)

app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(refunds_router)


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("refunds_api.main:app", host=host, port=port, reload=True, reload_dirs=["src"])
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
