import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from congregation.adapters.sqlite.migrator import SQLiteMigrator
from congregation.api.deps import get_settings
from congregation.app_shell.config import validate_ops_rules
from congregation.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules, validate and migrate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules)
        logger.info("Rules loaded from %s", settings.rules_path)
        os.makedirs(settings.data_dir, exist_ok=True)
        SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    except (OSError, ValueError, RuntimeError) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


logging.basicConfig(
    level=os.environ.get("CONGREGATION_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Congregation API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from congregation.api.routes import cron, forms, rota  # noqa: E402

app.include_router(rota.router, prefix="/api/admin/rota", tags=["Admin Rota"])
app.include_router(cron.router, prefix="/api/cron", tags=["Cron"])
app.include_router(forms.router, prefix="/api/forms", tags=["Forms"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
