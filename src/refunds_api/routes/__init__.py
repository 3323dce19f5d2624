"""API routes package.

- health: Liveness check
- refunds: Refund processing and cancellation policy lookup

All routers are registered in main.py.
"""

from refunds_api.routes.health import router as health_router
from refunds_api.routes.refunds import router as refunds_router

__all__ = ["health_router", "refunds_router"]
