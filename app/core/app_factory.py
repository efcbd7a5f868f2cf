from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (metadata, services, middleware, handlers,
routers) so every app instance owns its own in-memory state. Tests build a
fresh app per case instead of sharing the module-level one.
"""

import time
from typing import Callable

from fastapi import FastAPI

from app.api.routes import accounts_router, health_router, items_router
from app.core.config import AppSettings, settings
from app.core.container import build_services
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations


def create_app(
    app_settings: AppSettings | None = None,
    *,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Overrides ``settings.app`` (used by tests).
        clock: Time source for the throttle windows and recharge timestamps.

    Returns:
        Configured FastAPI app with services, middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    cfg = app_settings or settings.app

    app = FastAPI(
        title="Quota Items API",
        description=(
            "Token-gated CRUD over an in-memory item collection. Each token "
            "carries a request-credit balance: listing and creating items cost "
            "one credit, /recharge adds more. Registration and recharge are "
            "throttled per client IP."
        ),
        version="0.1.0",
        debug=cfg.debug,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    app.state.services = build_services(cfg, clock=clock)

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(accounts_router)
    app.include_router(items_router)

    apply_openapi_customizations(app)

    return app
