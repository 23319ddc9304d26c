import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from db import create_db_and_tables
from web.api_router import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    await create_db_and_tables()
    logging.info("[Startup] Database ready")
    yield
    logging.warning('Shutting down..')


app = FastAPI(lifespan=lifespan)

if config.WEB_CORS_ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.WEB_CORS_ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["POST"],
        allow_headers=["Content-Type", "Authorization"],
    )
    logging.info(f"[Startup] CORS middleware enabled for origins: {config.WEB_CORS_ALLOWED_ORIGINS}")

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


def main() -> None:
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT)
