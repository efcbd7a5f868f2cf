from __future__ import annotations

from app.api.routes.accounts import router as accounts_router
from app.api.routes.health import router as health_router
from app.api.routes.items import router as items_router

__all__ = ["accounts_router", "health_router", "items_router"]
