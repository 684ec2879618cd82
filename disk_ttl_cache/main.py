import logging
from pathlib import Path

from fastapi import FastAPI

from disk_ttl_cache.api.routes_cache import router as cache_router
from disk_ttl_cache.settings import Settings
from disk_ttl_cache.storage import DiskStore


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    log = logging.getLogger("disk_ttl_cache")
    log.info("Starting app...")
    log.info("Cache path: %s, clean_every: %sms", settings.cache_path, settings.clean_every)

    app = FastAPI(title="Disk TTL cache", version="0.1.0")

    store = DiskStore(settings.cache_path, clean_every=settings.clean_every)

    app.state.settings = settings
    app.state.store = store

    @app.on_event("startup")
    def _startup():
        if settings.create_cache_path:
            Path(settings.cache_path).mkdir(parents=True, exist_ok=True)
        store.start()

    @app.on_event("shutdown")
    def _shutdown():
        store.stop()

    app.include_router(cache_router)
    return app


app = create_app()
