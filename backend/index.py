"""
Community Admin Backend - FastAPI Application
Assembles the routers, backends, error handling and session middleware.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from community_admin import __version__
from community_admin.config import settings, logger
from community_admin.dependencies import close_http_client
from community_admin.exceptions import AdminError
from community_admin.providers.database import initialize_firebase, close_db
from community_admin.providers.storage import initialize_storage
from community_admin.routers import ROUTERS

# ============================================
# Lifespan Context Manager
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting Community Admin Backend...")
    initialize_firebase()
    initialize_storage()
    logger.info("Community Admin Backend started successfully")
    yield
    logger.info("Shutting down...")
    await close_db()
    await close_http_client()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Community Admin Backend",
        description="Backend API for the community services admin dashboard",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-New-Token", "Content-Disposition"],
    )

    # ============================================
    # Exception Handlers
    # ============================================

    @app.exception_handler(AdminError)
    async def admin_error_handler(request: Request, exc: AdminError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request")
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})

    # ============================================
    # Middleware
    # ============================================

    @app.middleware("http")
    async def add_new_token_header(request: Request, call_next):
        response = await call_next(request)
        if hasattr(request.state, "new_token"):
            response.headers["X-New-Token"] = request.state.new_token
        return response

    # ============================================
    # Routes: Health & Root
    # ============================================

    @app.get("/")
    async def root():
        return {"message": "Community Admin Backend API", "version": __version__, "docs": "/docs"}

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()

# ============================================
# Entry Point
# ============================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("index:app", host=settings.HOST, port=settings.PORT, reload=True)
