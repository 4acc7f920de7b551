import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.database import create_tables, get_engine
from .core.errors import PostRoomError
from .api import api_router

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Turn service error kinds into JSON responses with their status code."""

    @app.exception_handler(PostRoomError)
    async def handle_postroom_error(request: Request, exc: PostRoomError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.url.path}: {exc.message} {exc.context}")
        else:
            logger.info(f"{exc.error_code} on {request.url.path}: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error_code, "message": exc.message},
            headers=headers,
        )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Post Room API",
        description="Blogging backend: accounts, sessions, drafts and follower notifications",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Authorization"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting up Post Room API...")

        if settings.AUTO_CREATE_TABLES:
            engine = get_engine()
            if engine:
                try:
                    logger.info("Auto-creating database tables...")
                    create_tables(engine)
                    logger.info("Database tables created successfully!")
                except Exception as e:
                    logger.error(f"Failed to create database tables: {e}")
            else:
                logger.warning("Database engine not available. Skipping table creation.")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down Post Room API...")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": "Post Room API", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        """Health check endpoint with database status."""
        from sqlalchemy import text

        status = {"status": "healthy", "database": "unknown"}

        engine = get_engine()
        if engine:
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                status["database"] = "connected"
            except Exception as e:
                status["database"] = f"error: {str(e)}"
                status["status"] = "degraded"
        else:
            status["database"] = "not_available"
            status["status"] = "degraded"

        return status

    return app


app = create_app()
