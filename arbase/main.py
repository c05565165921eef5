# SPDX-License-Identifier: Apache-2.0
"""FastAPI app factory. Thin layer: logging, security middleware, routers."""
import logging

from fastapi import FastAPI

from arbase.config import settings
from arbase.core.security import add_security_middleware, get_limiter
from arbase.database import create_db_and_tables
from arbase.routers import analyze, auth, datasets, reviews, stats, system, users


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Africa Research Base API", version="0.1.0")
    app.state.limiter = get_limiter()

    add_security_middleware(app)

    @app.on_event("startup")
    def on_startup():
        settings.upload_dir_path.mkdir(parents=True, exist_ok=True)
        create_db_and_tables()
        logging.getLogger("arbase").info(
            "Africa Research Base API started (AI: %s, chain: %s)",
            "enabled" if settings.anthropic_api_key else "heuristic",
            "enabled" if settings.chain_enabled else "disabled",
        )

    app.include_router(auth.router, prefix="/auth")
    app.include_router(users.router, prefix="/users")
    app.include_router(datasets.router, prefix="/datasets")
    app.include_router(reviews.router, prefix="/reviews")
    app.include_router(stats.router, prefix="/stats")
    app.include_router(system.router, prefix="/system")
    app.include_router(analyze.router)

    return app


app = create_app()
