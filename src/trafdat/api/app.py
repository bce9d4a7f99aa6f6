from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trafdat.api.middleware import CacheConfig, TtlResponseCacheMiddleware
from trafdat.api.routes_archive import router as archive_router
from trafdat.api.routes_exports import router as exports_router
from trafdat.logging_config import configure_logging
from trafdat.settings import get_config


def create_app() -> FastAPI:
    configure_logging()
    config = get_config()

    app = FastAPI(title="Trafdat Archive API", version="0.1.0")

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    if config.api.cache.enabled:
        app.add_middleware(
            TtlResponseCacheMiddleware,
            config=CacheConfig(
                enabled=True,
                ttl_seconds=float(config.api.cache.ttl_seconds),
                include_paths=tuple(config.api.cache.include_paths),
                base_path=config.archive.base_path,
                max_body_bytes=int(config.api.cache.max_body_bytes),
            ),
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors.allow_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Exports first: its literal prefix would otherwise match the archive sample route.
    app.include_router(exports_router, tags=["exports"])
    app.include_router(archive_router, tags=["archive"])

    return app


app = create_app()
