import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, status
from app.core.db import init_db, close_db
from app.api.v1.orders import router as orders_router
from app.api.v1.inventory import router as inventory_router
from app.consumers.outbox_relayer import start_outbox_relayer
from app.core.config import OUTBOX_RELAYER_IN_PROCESS, PROJECT_NAME, VERSION
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging_config import configure_logging
from app.events.publisher import KafkaEventPublisher

configure_logging()
log = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Connect to DB and generate schemas

    relayer_task = None
    publisher = None
    if OUTBOX_RELAYER_IN_PROCESS:
        # Background relayer sharing this process; one cycle in flight at a time
        publisher = KafkaEventPublisher()
        relayer_task = asyncio.create_task(start_outbox_relayer(publisher))

    yield

    if relayer_task:
        relayer_task.cancel()
        with suppress(asyncio.CancelledError):
            await relayer_task
        await publisher.close()
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    # Configure API documentation and paths
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers for modular API structure
app.include_router(orders_router, prefix="/api/v1/orders", tags=["Order Management"])
app.include_router(inventory_router, prefix="/api/v1/inventory", tags=["Inventory"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
