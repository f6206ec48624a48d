import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from payroll_engine.core.config import settings
from payroll_engine.core.error_handlers import register_error_handlers
from payroll_engine.core.logging_config import setup_logging
from payroll_engine.core.middleware import add_middleware
from payroll_engine.payrolls.routes import router as payrolls_router
from payroll_engine.payrolls.service import PayrollCalculationService

logger = logging.getLogger(__name__)


def create_app(payroll_service: PayrollCalculationService, configure_logging: bool = True) -> FastAPI:
    """Build the HTTP app around an already composed payroll service."""
    if configure_logging:
        setup_logging(
            log_level=settings.log_level,
            log_file=settings.log_file,
            enable_file_rotation=settings.enable_file_rotation
        )

    app = FastAPI(
        title=settings.app_name,
        description="Multi-region payroll calculation engine (India, Philippines)",
        version="1.0.0",
        debug=settings.debug
    )
    app.state.payroll_service = payroll_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    add_middleware(app)

    app.include_router(payrolls_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "message": "Payroll Calculation Engine API",
            "version": "1.0.0",
            "docs": "/docs",
            "endpoints": {
                "calculate": "/api/v1/payrolls/calculate",
                "bulk_calculate": "/api/v1/payrolls/bulk-calculate",
                "regions": "/api/v1/payrolls/regions",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "message": "API is running",
            "regions": [r.country_code for r in payroll_service.list_regions()],
            "reference_cache": payroll_service.cache.get_stats(),
        }

    logger.info(f"{settings.app_name} application created")
    return app
