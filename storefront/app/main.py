from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from storefront.app.startup import configure_logging, run_startup_checks
from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.exceptions import register_exception_handlers

# ========== Product Reviews ==========
from storefront.modules.reviews.routers.reviews_router import router as reviews_router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="""
    Product catalog REST API.

    ## Product Reviews

    * List, read, create, update and delete the reviews of a product
    * Batch create/update/delete in a single request
    * `OPTIONS` on the collection describes the review schema

    ## Authentication

    Endpoints require a JWT bearer token. Reviews can be managed by the
    `admin` and `shop_manager` roles.
    """,
    version="2.0.0",
)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reviews_router, prefix=settings.api_prefix)


@app.on_event("startup")
async def startup_event():
    """Validate configuration and database before serving"""
    run_startup_checks()


@app.get("/", tags=["General"])
def root():
    return {"message": f"{settings.app_name} is running", "api": settings.api_prefix}


@app.get("/health", tags=["General"])
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return {"status": "unhealthy", "database": "unavailable"}
