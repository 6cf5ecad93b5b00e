"""Application entrypoint for the FastAPI service."""

from __future__ import annotations

from fastapi import FastAPI

from app.api.v1.router import get_api_router
from app.core.config import get_config
from app.core.startup import bootstrap


def create_app() -> FastAPI:
    cfg = get_config()
    application = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION)
    application.include_router(get_api_router())

    @application.get("/")
    def root() -> dict:
        return {"service": cfg.APP_NAME, "version": cfg.APP_VERSION, "api_prefix": cfg.API_PREFIX}

    return application


# Expose ASGI app for `uvicorn app.main:app`.
app = create_app()


if __name__ == "__main__":
    import uvicorn

    bootstrap(create_tables=True)
    cfg = get_config()
    uvicorn.run(app, host=cfg.API_HOST, port=cfg.API_PORT)
