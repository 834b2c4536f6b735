from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
import logging

from ryo.core.config import settings
from ryo.core.exceptions import exception_handlers
from ryo.core.storage import r2_storage
from ryo.db.init_db import create_all_tables
from ryo.db.session import engine
from ryo.middleware.auth_logging import AuthLoggingMiddleware
from ryo.middleware.request_logging import RequestLoggingMiddleware
from ryo.middleware.timeout import RequestTimeoutMiddleware
from ryo.modules.auth.api.router import router as auth_router
from ryo.modules.media.router import router as files_router
from ryo.modules.posts.api.router import router as posts_router
from ryo.modules.posts.likes.api.router import router as likes_router
from ryo.modules.user_management.api.router import router as profile_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("ryo")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    create_all_tables()
    if not r2_storage.check_connection():
        logger.warning("Object storage is unavailable; file endpoints will fail until it is reachable")

    yield

    engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    exception_handlers=exception_handlers,
    debug=settings.DEBUG,
    description="Posts, likes and profiles for ryo.cat",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    swagger_ui_parameters={"defaultModelsExpandDepth": -1},
)

# Innermost, so timed-out requests are still logged
app.add_middleware(RequestTimeoutMiddleware, timeout=settings.REQUEST_TIMEOUT)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(AuthLoggingMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MINIMUM_SIZE, compresslevel=settings.GZIP_LEVEL)

# Added last so it wraps everything and answers preflight requests itself
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
    expose_headers=["Link"],
    max_age=300,
)

app.include_router(auth_router, prefix=settings.API_V1_STR, tags=["authentication"])
app.include_router(profile_router, prefix=f"{settings.API_V1_STR}/profile", tags=["profile"])
app.include_router(posts_router, prefix=f"{settings.API_V1_STR}/posts", tags=["posts"])
app.include_router(likes_router, prefix=f"{settings.API_V1_STR}/posts/{{post_id}}/like", tags=["likes"])
app.include_router(files_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {
        "message": "Welcome to ryo",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs" if settings.DEBUG else None,
    }


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ryo.main:app", host="0.0.0.0", port=8000, reload=True)
