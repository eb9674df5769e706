from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from ticketdesk.db.init_db import init_db
from ticketdesk.logging_config import configure_app_logging
from ticketdesk.routers import health, identities, permissions, tickets
from ticketdesk.security.config import load_security_config
from ticketdesk.security.dependencies import enforce_security
from ticketdesk.security.handlers import register_exception_handlers
from ticketdesk.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        app.state.security_config = load_security_config(settings.resolved_security_config_path())
        logger.info("Loaded security config: %s", settings.resolved_security_config_path())
        init_db(seed_demo_data=settings.seed_demo_data)
        logger.info("Database initialized (tables ensured, reserved roles seeded)")

        yield

    # Global dependency: every route passes the gate before its handler runs.
    app = FastAPI(title="ticketdesk", dependencies=[Depends(enforce_security)], lifespan=lifespan)
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(identities.router)
    app.include_router(permissions.router)
    app.include_router(tickets.router)

    return app


app = create_app()
