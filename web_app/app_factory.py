"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import open_router, teams_router
from .middleware.headers import ClientHeadersMiddleware
from .middleware.logging import LoggingMiddleware

logger = logging.getLogger("brandlink.web")


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed bodies and parameters as a plain 400."""
    logger.info(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request"},
    )


def create_app(
    db_instance,
    service_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.
    
    Args:
        db_instance: Database instance (None when no database is configured)
        service_instance: Service instance (None when no database is configured)
        config: Configuration instance
        
    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="BrandLink",
        description="Team-branded short links",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    
    # Store instances in app state for access in routes
    app.state.db = db_instance
    app.state.service = service_instance
    app.state.config = config
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # Added last so it runs first and the logging middleware sees the client address
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ClientHeadersMiddleware)
    
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    
    app.include_router(open_router, tags=["Open"])
    app.include_router(teams_router, tags=["Teams"])
    
    return app
