import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import alembic.config
import alembic.command
from medbay.core.database import engine
from medbay.core.exceptions import DataAccessError, RowNotFoundError
from medbay.api.router import api_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_migrations():
    """Sync function to run migrations"""
    alembic_cfg = alembic.config.Config("alembic.ini")
    alembic_cfg.attributes["configure_logger"] = False
    alembic.command.upgrade(alembic_cfg, "head")


# Close the engine once everything is done and close all the sessions
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Apply any pending migrations automatically when the app starts
    try:
        await asyncio.to_thread(run_migrations)
        logger.info("Migrations applied successfully (or already up-to-date)")
    except Exception as e:
        logger.error(f"Migration error during startup: {e}")

    yield
    await engine.dispose()


app = FastAPI(title="Medbay Inventory Assistant", lifespan=lifespan)

# Include the master router containing all our endpoints
app.include_router(api_router)


# Reads that slip past a router's own handling
@app.exception_handler(DataAccessError)
async def data_access_error_handler(request: Request, error: DataAccessError):
    if isinstance(error, RowNotFoundError):
        return JSONResponse({"detail": error.message}, status_code=status.HTTP_404_NOT_FOUND)
    logger.error(f"Unhandled data access error on {request.url.path}: {error.message}")
    return JSONResponse(
        {"detail": error.message}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


@app.get("/")
async def root():
    return {"message": "Medbay inventory assistant is running"}
