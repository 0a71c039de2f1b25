import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import register_error_handlers
from app.core.logging import setup_logging
from app.core.request_log_middleware import RequestLogMiddleware
from app.db.session import Database
from app.routers import ping, courses, applications, admin
from app.services.mailer import Notifier, SmtpMailer

logger = logging.getLogger(__name__)

def custom_generate_unique_id(route):
    return f"{route.tags[0]}_{route.name}" if route.tags else route.name


def create_app(database: Database | None = None, notifier: Notifier | None = None) -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database(settings.DATABASE_URL)
        db.open()
        if settings.AUTO_CREATE_TABLES:
            db.create_all()
        app.state.db = db
        app.state.notifier = notifier or SmtpMailer(settings)
        logger.info("Applicant portal started")
        try:
            yield
        finally:
            db.close()

    app = FastAPI(title="Applicant Portal",
        version="1.0.0",
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogMiddleware)
    register_error_handlers(app)

    app.include_router(ping.router)
    app.include_router(courses.router)
    app.include_router(applications.router)
    app.include_router(admin.router)
    return app


app = create_app()
