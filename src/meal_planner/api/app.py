"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from meal_planner.api.meal_plans import router as meal_plans_router
from meal_planner.api.optimizations import router as optimizations_router
from meal_planner.app_logging import configure_logging
from meal_planner.containers import AppContainer
from meal_planner.errors import ErrorCategory, MealPlannerError

_STATUS_BY_CATEGORY = {
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.INVALID_FORMAT: 502,
    ErrorCategory.SERVICE_UNAVAILABLE: 503,
    ErrorCategory.CONFIGURATION: 500,
    ErrorCategory.GENERATION: 500,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(meal_plans_router)
    app.include_router(optimizations_router)

    @app.exception_handler(MealPlannerError)
    async def meal_planner_error_handler(
        request: Request, exc: MealPlannerError
    ) -> JSONResponse:
        status_code = _STATUS_BY_CATEGORY.get(exc.category, 500)
        if status_code >= 500:
            logger.error(
                "%s %s failed (%s): %s",
                request.method,
                request.url.path,
                exc.category,
                exc.message,
            )
        return JSONResponse(
            status_code=status_code,
            content={"error": {"message": exc.message, "category": exc.category}},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
