# accounts/main.py
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from accounts.api.v1.routers import users
from accounts.config import Settings
from accounts.core.db import build_tortoise_config, close_db, init_db
from accounts.core.errors import register_error_handlers
from accounts.core.security import TokenIssuer
from accounts.core.store import TortoiseUserStore, UserStore

logger = logging.getLogger("uvicorn.error")


def create_app(settings: Settings | None = None, store: UserStore | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; read from the environment when omitted
            (missing DATABASE_URL / DATABASE_KEY / JWT_SECRET is fatal).
        store: User record store. When omitted, a TortoiseUserStore is used
            and the Tortoise connection is opened on startup and closed on
            shutdown.
    """
    if settings is None:
        settings = Settings.from_env()

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.tokens = TokenIssuer(settings.jwt_secret, settings.access_token_expire_minutes)
    app.state.store = store if store is not None else TortoiseUserStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if store is None:
        tortoise_config = build_tortoise_config(settings.database_url, settings.database_key)

        @app.on_event("startup")
        async def on_startup():
            await init_db(tortoise_config, generate_schemas=settings.generate_schemas)
            logger.info("[startup] database connected, CORS origin=%s", settings.cors_origin)

        @app.on_event("shutdown")
        async def on_shutdown():
            await close_db()

    register_error_handlers(app)

    # REST
    app.include_router(users.router, prefix="/api")

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app


def main() -> None:
    settings = Settings.from_env()
    logger.info("Server is starting on %s:%s", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
