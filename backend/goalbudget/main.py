import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .auth import router as auth_router
from .config import settings
from .database import close_db_pool, open_db_pool
from .expenses import router as expenses_router
from .goals import router as goals_router
from .salary import router as salary_router
from .summary import router as summary_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.db_pool = await open_db_pool(settings)
    try:
        yield
    finally:
        await close_db_pool(app.state.db_pool)
        app.state.db_pool = None


def create_app() -> FastAPI:
    application = FastAPI(title=settings.app_name, lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Summary routes go first so /expenses/summary is never read as an expense id.
    application.include_router(summary_router)
    application.include_router(auth_router)
    application.include_router(salary_router)
    application.include_router(expenses_router)
    application.include_router(goals_router)

    @application.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
