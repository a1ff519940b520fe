import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from adventure.api.routes import router
from adventure.catalog.startup import init_catalog_for_app

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    init_catalog_for_app()
    yield


app = FastAPI(title="adventure-engine", version="0.1.0", lifespan=_lifespan)
app.include_router(router)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "adventure-engine", "version": "0.1.0"}
