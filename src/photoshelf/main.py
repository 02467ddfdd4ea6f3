import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from photoshelf.api.files import router as files_router
from photoshelf.api.images import router as images_router
from photoshelf.api.uploads import router as uploads_router
from photoshelf.dependencies import get_upload_settings
from photoshelf.errors import register_exception_handlers
from photoshelf.logging_config import configure_logging
from photoshelf.metrics import setup_metrics
from photoshelf.request_context import add_request_context

# uvicorn imports this module when starting the app, so this also configures its loggers
configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Make sure the upload directory exists before serving requests."""
    logger.info("Starting up application...")
    settings = app.dependency_overrides.get(get_upload_settings, get_upload_settings)()
    try:
        settings.storage_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create upload directory {settings.storage_dir}: {e}")
        raise
    logger.info(f"Storing uploads in {settings.storage_dir.resolve()}")

    yield

    logger.info("Shutting down application...")


app = FastAPI(title="photoshelf", redoc_url=None, redirect_slashes=False, lifespan=lifespan)

add_request_context(app)
register_exception_handlers(app)

app.include_router(uploads_router)
app.include_router(images_router)
app.include_router(files_router)

setup_metrics(app)


@app.get("/")
def read_root():
    return {"message": "Hello from photoshelf!"}
