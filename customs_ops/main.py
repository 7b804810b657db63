import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from customs_ops.api.deps import engine
from customs_ops.api.errors import register_error_handlers
from customs_ops.api.routers.exports import router as exports_router
from customs_ops.api.routers.failures import router as failures_router
from customs_ops.api.routers.health import router as health_router
from customs_ops.api.routers.packages import router as packages_router
from customs_ops.api.routers.platforms import router as platforms_router
from customs_ops.api.routers.shipments import router as shipments_router
from customs_ops.api.routers.uploads import router as uploads_router
from customs_ops.config import get_settings
from customs_ops.infrastructure.db.tables import metadata

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema is created on startup; migrations are not part of this service
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Customs Ops API started", extra={"in_memory": get_settings().use_in_memory})
    yield
    await engine.dispose()


app = FastAPI(title="Customs Ops API", version="0.1.0", lifespan=lifespan)
register_error_handlers(app)

app.include_router(health_router, tags=["Health"])
for router, tag in (
    (failures_router, "Failures"),
    (packages_router, "Packages"),
    (uploads_router, "Uploads"),
    (shipments_router, "Shipments"),
    (platforms_router, "Platforms"),
    (exports_router, "Exports"),
):
    app.include_router(router, prefix=API_PREFIX, tags=[tag])
