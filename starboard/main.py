import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from starboard.config import get_settings
from starboard.core.handlers import register_exception_handlers
from starboard.core.logging_config import configure_logging
from starboard.routers.evaluation import router as evaluation_router
from starboard.routers.health import router as health_router
from starboard.routers.interviews import router as interviews_router
from starboard.services.database import init_schema

logger = logging.getLogger(__name__)


# SWAGGER UI - tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Evaluation"},
    {"name": "Interview Slots"},
]


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=_OPENAPI_TAGS,
    )

    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    # REGISTER EXCEPTION HANDLERS
    register_exception_handlers(app)

    # REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
    app.include_router(health_router)       # Health
    app.include_router(evaluation_router)   # Evaluation
    app.include_router(interviews_router)   # Interview Slots

    # ROOT ENDPOINT
    @app.get("/", tags=["Root"], summary="Root endpoint")
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": {
                "swagger": "/docs",
                "redoc": "/redoc"
            },
            "status": "running"
        }

    # STARTUP EVENT
    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting %s (%s, db=%s)", settings.APP_NAME, settings.APP_ENV, settings.DB_BACKEND)
        if settings.DB_BACKEND == "sqlite":
            init_schema()

    # SHUTDOWN EVENT
    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down %s", settings.APP_NAME)

    return app


app = create_app()


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "starboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().DEBUG,
    )
