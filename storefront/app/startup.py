"""
Application startup validation and initialization.

Runs configuration and database checks before the API starts serving
requests, and configures logging for the process.
"""

import logging
from typing import List, Tuple

from sqlalchemy import text

from storefront.core.config import settings, validate_production_config
from storefront.core.database import Base, engine

logger = logging.getLogger(__name__)


class StartupValidator:
    """Validates application startup requirements"""

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def check_database_connection(self) -> bool:
        """Check database connectivity"""
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            logger.info("Database connection successful")
            return True
        except Exception as e:
            self.errors.append(f"Database connection failed: {str(e)}")
            return False

    def check_configuration(self) -> bool:
        """Check production-only configuration rules"""
        try:
            validate_production_config(settings)
        except ValueError as e:
            self.errors.append(str(e))
            return False

        if settings.debug:
            self.warnings.append("DEBUG is enabled")
        return True

    def ensure_local_schema(self) -> None:
        """Create tables for SQLite databases; other backends use Alembic"""
        if settings.database_url.startswith("sqlite"):
            Base.metadata.create_all(bind=engine)
            logger.info("SQLite schema ensured")

    def run_all_checks(self) -> Tuple[bool, List[str], List[str]]:
        self.check_configuration()
        if self.check_database_connection():
            self.ensure_local_schema()
        return not self.errors, self.errors, self.warnings


def run_startup_checks() -> Tuple[bool, List[str]]:
    """Run all startup checks; raise in production when any check fails"""
    # Models must be registered on Base before the schema is created
    import storefront.modules.reviews.models.review_models  # noqa: F401

    validator = StartupValidator()
    passed, errors, warnings = validator.run_all_checks()

    for warning in warnings:
        logger.warning(f"Startup warning: {warning}")
    for error in errors:
        logger.error(f"Startup error: {error}")

    if not passed and settings.is_production:
        raise RuntimeError("Cannot start in production with errors")
    elif not passed:
        logger.warning("Starting in development mode despite errors")
    else:
        logger.info("All startup checks passed")

    logger.info(f"Starting in {settings.environment.upper()} mode")
    return passed, warnings


def configure_logging() -> None:
    """Configure process-wide logging from settings"""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
