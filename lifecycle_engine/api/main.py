from contextlib import asynccontextmanager

from fastapi import FastAPI

from lifecycle_engine.api.container import get_container
from lifecycle_engine.api.errors import register_error_handlers
from lifecycle_engine.api.routes.apps import router as apps_router
from lifecycle_engine.config import LifecycleSettings
from lifecycle_engine.logging_config import configure_logging
from lifecycle_engine.reconciler.scheduler import ThreadPoolScheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(LifecycleSettings().log_level)
    yield
    # Only shut down a scheduler that was actually built
    if get_container.cache_info().currsize:
        scheduler = get_container().scheduler
        if isinstance(scheduler, ThreadPoolScheduler):
            scheduler.shutdown(wait=False)


app = FastAPI(title="Lifecycle Engine API", lifespan=lifespan)

@app.get("/health")
def health():
    return {"status": "ok"}

register_error_handlers(app)
app.include_router(apps_router)
