from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from be4real.core.config import settings
from be4real.core.errors import AppError, InternalError, InvalidInputError
from be4real.db.init_db import create_all_tables
from be4real.db.session import dispose_engine
from be4real.middleware.request_logging import RequestLoggingMiddleware
from be4real.middleware.auth_logging import AuthLoggingMiddleware
from be4real.modules.auth.api.router import router as auth_router
from be4real.modules.user_management.api.router import router as user_router
from be4real.modules.posts.api.router import router as posts_router
from be4real.modules.posts.reactions.api.router import router as reactions_router
from be4real.modules.home_feed.api.router import router as home_feed_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("be4real")

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    fields = ", ".join(".".join(str(part) for part in error["loc"][1:]) for error in errors)
    error = InvalidInputError(f"Invalid fields: {fields}" if fields else None)
    content = error.to_dict()
    content["errors"] = errors
    return JSONResponse(status_code=error.status_code, content=content)

async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = "not_found" if exc.status_code == 404 else "error"
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "kind": kind, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )

async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Database error on {request.method} {request.url.path}")
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())

# Initialize the FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    exception_handlers={
        AppError: app_error_handler,
        RequestValidationError: validation_error_handler,
        StarletteHTTPException: http_error_handler,
        SQLAlchemyError: store_error_handler,
    },
    debug=settings.DEBUG,
    description="BeReal-style photo sharing",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

@app.on_event("startup")
def startup_event():
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    if not create_all_tables():
        raise RuntimeError("Could not create database tables")

@app.on_event("shutdown")
def shutdown_event():
    dispose_engine()

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(AuthLoggingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Authorization"],
)

# Register API routers
app.include_router(auth_router, prefix=f"{settings.API_V1_STR}/auth", tags=["authentication"])
app.include_router(user_router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(posts_router, prefix=f"{settings.API_V1_STR}/posts", tags=["posts"])
app.include_router(reactions_router, prefix=f"{settings.API_V1_STR}/posts/{{post_id}}/reactions", tags=["reactions"])
app.include_router(home_feed_router, prefix=f"{settings.API_V1_STR}/feed", tags=["home feed"])

@app.get("/")
async def root():
    return {
        "message": "Welcome to Be4Real",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs" if settings.DEBUG else None,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("be4real.main:app", host="0.0.0.0", port=8080, reload=True)
