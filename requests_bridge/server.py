# requests_bridge/server.py
# Host service: patches the Jellyfin web client once the server has started.
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from requests_bridge.api.patch_status import router as patch_status_router
from requests_bridge.config import settings
from requests_bridge.telemetry import configure_logging
from requests_bridge.workers.patch_worker import PatchScheduler

log = logging.getLogger("requests_bridge.server")


def create_app(scheduler: PatchScheduler = None) -> FastAPI:
    scheduler = scheduler or PatchScheduler()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.debug("Starting index.html patch worker")
        scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            log.debug("Patch worker stopped (state=%s)", scheduler.state.value)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.patch_scheduler = scheduler
    app.include_router(patch_status_router)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok", "service": "requests-bridge"}

    return app


app = create_app()


def main():
    import uvicorn

    configure_logging(settings.LOG_LEVEL, settings.DEBUG)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
