import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from roomplan import __version__
from roomplan.exceptions import ConfigurationError, RoomPlannerError
from roomplan.logging_config import configure_logging
from roomplan.persistence import LayoutStore
from roomplan.settings import Settings, get_settings
from services.api.exception_handlers import room_planner_exception_handler
from services.api.routes import router as v1_router
from services.api.session import LayoutSession


def _default_settings() -> Settings:
    try:
        return get_settings()
    except ConfigurationError as exc:
        logger.warning(f"{exc.message}; falling back to built-in defaults")
        return Settings()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or _default_settings()

    configure_logging(settings.logging)

    app = FastAPI(
        title="Room Planner API",
        version=__version__,
        description="Persisted room layout: lines, furniture, import/export and snapping",
    )

    ui_origin = os.getenv("UI_ORIGIN", "http://localhost:3000")
    allowed_origins = sorted({ui_origin, "http://localhost:3000", "http://127.0.0.1:3000"})
    logger.info(f"CORS allowed origins: {allowed_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = LayoutStore(settings.storage.build())
    app.state.settings = settings
    app.state.session = LayoutSession(store, settings.grid)
    logger.info(
        "API initialised with storage={backend} cell_size={cell_size} inches_per_cell={scale}",
        backend=settings.storage.backend,
        cell_size=settings.grid.cell_size,
        scale=app.state.session.document.config.inches_per_cell,
    )

    @app.get("/healthz", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.add_exception_handler(RoomPlannerError, room_planner_exception_handler)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": type(exc).__name__,
                "message": str(exc),
            },
        )

    app.include_router(v1_router)

    return app


app = create_app()


__all__ = ["app", "create_app"]
