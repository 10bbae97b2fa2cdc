# careerspage/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from careerspage.api.v1 import events, health, storage
from careerspage.core.config import Settings, get_settings
from careerspage.core.errors import EventError, ValidationError
from careerspage.core.responses import error_response
from careerspage.db.database import build_engine, build_session_factory, init_db
from careerspage.services.ai.gateway import build_text_gateway

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Builds the FastAPI app; process-wide clients live on app.state."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Create tables and the asset bucket before the first request
        init_db(app.state.engine, app.state.session_factory, settings.STORAGE_BUCKET)
        logger.info("STARTUP: Database ready.")
        yield
        app.state.engine.dispose()

    # Create a FastAPI instance
    app = FastAPI(
        title="Careers Page Builder API",
        description="Event-driven backend for building branded company careers pages",
        version="0.1.0",
        lifespan=lifespan,
    )

    engine = build_engine(settings.DATABASE_URL)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.ai = build_text_gateway(settings)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EventError)
    async def event_error_handler(request: Request, exc: EventError):
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        problems = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return error_response(ValidationError("Invalid request body", details=problems))

    app.include_router(events.router)
    app.include_router(storage.router)
    app.include_router(health.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
