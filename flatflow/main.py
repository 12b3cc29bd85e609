import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text

from .config import settings
from .database import engine, get_db
from .core.middleware import ExceptionHandlingMiddleware, register_exception_handlers
from .models import Base
from .schemas.result import Result, Error, ErrorCategory

# Import routes
from .api.v1 import auth, users, households, invitations, chores, shopping, expenses, realtime

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    description="FlatFlow API - Shared household chores, shopping and expenses",
    lifespan=lifespan,
)

# Add exception handling middleware FIRST
app.add_middleware(ExceptionHandlingMiddleware, log_internal_errors=settings.DEBUG)
register_exception_handlers(app, log_internal_errors=settings.DEBUG)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(
    auth.router, prefix=f"{settings.API_V1_STR}/auth", tags=["authentication"]
)
app.include_router(users.router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(
    households.router,
    prefix=f"{settings.API_V1_STR}/households",
    tags=["households"]
)
app.include_router(
    invitations.router,
    prefix=f"{settings.API_V1_STR}/invitations",
    tags=["invitations"]
)
app.include_router(
    chores.router,
    prefix=f"{settings.API_V1_STR}/households/{{household_id}}/chores",
    tags=["chores"]
)
app.include_router(
    shopping.router,
    prefix=f"{settings.API_V1_STR}/households/{{household_id}}/shopping",
    tags=["shopping"]
)
app.include_router(
    expenses.router,
    prefix=f"{settings.API_V1_STR}/households/{{household_id}}/expenses",
    tags=["expenses"]
)
app.include_router(
    realtime.router,
    prefix=f"{settings.API_V1_STR}/realtime",
    tags=["realtime"]
)


@app.get("/", response_model=Result[dict])
async def root():
    """Root endpoint with API information"""
    return Result.successful(
        data={
            "message": f"Welcome to {settings.PROJECT_NAME} API",
            "version": settings.VERSION,
            "docs": "/docs",
            "status": "online",
        }
    )


@app.get("/health", response_model=Result[dict])
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint for monitoring"""
    try:
        db.execute(text("SELECT 1"))
        return Result.successful(data={"status": "healthy", "database": "connected"})
    except Exception as e:
        return Result.failure(
            error=Error(
                message=f"Health check failed: {e}",
                status_code=503,
                category=ErrorCategory.INTERNAL,
            )
        )
