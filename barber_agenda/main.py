# barber_agenda/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session

from barber_agenda.auth import ensure_admin
from barber_agenda.config import Settings, get_settings
from barber_agenda.db import create_db_engine, init_db
from barber_agenda.errors import BookingError, StoreUnavailable
from barber_agenda.routers import (
    admin_routes,
    appointments_routes,
    auth_routes,
    notifications_routes,
    slots_routes,
    users_routes,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root_logger.setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = app.state.engine
    init_db(engine)
    with Session(engine) as session:
        admin = ensure_admin(session, app.state.settings)
        if admin is not None:
            logger.info("Admin account: %s", admin.email)
    yield
    engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Barber Agenda", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = create_db_engine(settings)

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable, try again"})

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    app.include_router(auth_routes.router)
    app.include_router(users_routes.router)
    app.include_router(slots_routes.router)
    app.include_router(appointments_routes.router)
    app.include_router(admin_routes.router)
    app.include_router(notifications_routes.router)
    return app


app = create_app()
