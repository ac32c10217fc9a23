from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .ai.router import router as ai_router
from .budgets import router as budgets_router
from .config import settings
from .currencies import router as currencies_router
from .dashboard import router as dashboard_router
from .database import close_db_pool, init_db_pool
from .errors import register_exception_handlers
from .goals import router as goals_router
from .investments import router as investments_router
from .logs import configure_logging
from .profile import router as profile_router
from .quotes import router as quotes_router
from .savings import router as savings_router
from .transactions import router as transactions_router

configure_logging(settings.log_level, json_output=settings.log_json)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    await init_db_pool()
    logger.info("app_started", app_name=settings.app_name)
    yield
    await close_db_pool()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(profile_router)
app.include_router(transactions_router)
app.include_router(budgets_router)
app.include_router(goals_router)
app.include_router(investments_router)
app.include_router(savings_router)
app.include_router(dashboard_router)
app.include_router(currencies_router)
app.include_router(quotes_router)
app.include_router(ai_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
