"""
main.py – FastAPI app entry point (slim wire-up only).
Connects routes and lifespan. No business logic here.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .routes import products, search, square, system
from .deps import get_store

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Preparing catalog tables…")
    get_store().create_tables()
    logger.info("Ready.")
    yield
    logger.info("Shutdown.")


app = FastAPI(
    title="Nearby Stock API",
    description="Find products in stock at merchants near you.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(CORSMiddleware, allow_origins=config.CORS_ORIGINS, allow_methods=["*"], allow_headers=["*"])

app.include_router(system.router)
app.include_router(search.router)
app.include_router(products.router)
app.include_router(square.router)
